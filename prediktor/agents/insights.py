"""
Insights
--------
Turns a comparative analysis into growth projections, a sector benchmark and
headline scores. Pure arithmetic, no API call.

  g          = sector growth rate
  projected  = min(1.5 * g, 30)
  month i    = max(0, g + (projected - g) * (i + 12) / 24)     i in -12..12
  gap        = company growth - sector growth
"""

from typing import Optional

from prediktor.models.schemas import (
    AIScores,
    BenchmarkData,
    BenchmarkIndicator,
    ComparativeAnalysis,
    GrowthData,
    InsightData,
    InsightMetadata,
    MonthlyProjection,
    ScoreCard,
)
from prediktor.utils.validation import round_half_up

MAX_PROJECTED_GROWTH = 30


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def _month_label(offset: int) -> str:
    if offset < 0:
        return f"M{offset}"
    if offset == 0:
        return "M"
    return f"M+{offset}"


def risk_level(gap: float) -> str:
    if gap > 5:
        return "Low"
    if gap > 0:
        return "Moderate"
    return "High"


def build_insights(
    analysis: ComparativeAnalysis,
    is_demo_data: bool = False,
    company_name: Optional[str] = None,
) -> InsightData:
    sector = analysis.sector_data
    current = sector.growth_rate
    projected = min(current * 1.5, MAX_PROJECTED_GROWTH)

    projections = [
        MonthlyProjection(
            month=_month_label(i),
            growth=round_half_up(max(0, current + (projected - current) * (i + 12) / 24), 1),
        )
        for i in range(-12, 13)
    ]
    growth_values = [p.growth for p in projections]

    company_growth = analysis.health_score.growth
    gap = company_growth - sector.growth_rate
    level = risk_level(gap)
    risk_percentage = _clamp(100 - gap * 10, 0, 100)

    recommendation = (analysis.recommendations.immediate or ["Refine the strategy"])[0]
    opportunity = (sector.opportunities or ["New market"])[0]

    return InsightData(
        growth_data=GrowthData(
            current=current,
            projected_12_months=projected,
            min_growth=min(growth_values),
            max_growth=max(growth_values),
            evolution_12_months=projected - current,
            monthly_projections=projections,
        ),
        benchmark_data=BenchmarkData(
            company_growth=company_growth,
            sector_growth=sector.growth_rate,
            gap=gap,
            risk_level=level,
            indicators=[
                BenchmarkIndicator(indicator="Growth", company=company_growth, sector=sector.growth_rate),
                BenchmarkIndicator(
                    indicator="Profitability",
                    company=analysis.health_score.profitability,
                    sector=sector.key_metrics.profitability,
                ),
                BenchmarkIndicator(indicator="Risk", company=risk_percentage / 10, sector=5),
            ],
        ),
        ai_scores=AIScores(
            risk_level=level,
            risk_percentage=risk_percentage,
            risk_description=f"{level} risk according to the analysis",
            objective_probability=_clamp(85 + gap * 2, 50, 95),
            objective_description="of reaching your annual objectives",
            recommendation=ScoreCard(
                title=recommendation,
                description="Recommendation based on the sector analysis",
                detail="+5% performance",
            ),
            opportunity=ScoreCard(
                title=opportunity,
                description="Opportunity detected in the sector",
                detail="+10% revenue",
            ),
        ),
        metadata=InsightMetadata(
            company_name=company_name or analysis.company_data.sector,
            sector=analysis.company_data.sector,
            is_demo_data=is_demo_data,
        ),
    )

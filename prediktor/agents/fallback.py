"""
Fallback Data Provider
----------------------
Deterministic demo data used when the generative API cannot produce an
analysis. Nothing here touches the network.

Charts are derived from the company's own figures so the demo still reflects
what the user typed in:

  p = (revenue - expenses) / revenue * 100
  trend(company) = p * (0.8, 0.9, 1.0, 1.1)
  trend(sector)  = s * (0.9, 0.95, 1.0, 1.05)     s = sector profitability
"""

from typing import List

from prediktor.models.schemas import (
    AnalysisDelta,
    Charts,
    CompanyData,
    ComparativeAnalysis,
    CompetitivePosition,
    HealthScore,
    MarketPositionPoint,
    Recommendations,
    RevenuePoint,
    SectorData,
    TrendPoint,
)
from prediktor.utils.validation import calculate_efficiency, calculate_profitability

COMPANY_TREND = (0.8, 0.9, 1.0, 1.1)
SECTOR_TREND = (0.9, 0.95, 1.0, 1.05)
DEFAULT_PERIODS = ("2022", "2023", "2024", "2025")


def fallback_sector_data(sector: str) -> SectorData:
    return SectorData(sector=sector)


def fallback_health_score() -> HealthScore:
    return HealthScore()


def trend_periods(year: str) -> List[str]:
    """year-2 .. year+1 for a numeric year, the fixed 2022-2025 range otherwise."""
    try:
        base = int(str(year).strip())
    except ValueError:
        return list(DEFAULT_PERIODS)
    return [str(base + offset) for offset in (-2, -1, 0, 1)]


def fallback_analysis_delta(
    company: CompanyData,
    sector_data: SectorData,
    health_score: HealthScore,
) -> AnalysisDelta:
    profitability = calculate_profitability(company.revenue, company.expenses)
    sector_profitability = sector_data.key_metrics.profitability
    efficiency = calculate_efficiency(company.revenue, company.employees)
    sector_efficiency = calculate_efficiency(
        sector_data.average_revenue, sector_data.average_employees
    )

    revenue_comparison = [
        RevenuePoint(company=company.revenue, sector=sector_data.average_revenue, label="Revenue"),
        RevenuePoint(company=company.expenses, sector=sector_data.average_expenses, label="Expenses"),
        RevenuePoint(
            company=company.revenue - company.expenses,
            sector=sector_data.average_revenue - sector_data.average_expenses,
            label="Profit",
        ),
        RevenuePoint(company=efficiency, sector=sector_efficiency, label="Revenue/Employee"),
    ]
    profitability_trend = [
        TrendPoint(company=profitability * c, sector=sector_profitability * s, period=period)
        for c, s, period in zip(COMPANY_TREND, SECTOR_TREND, trend_periods(company.year))
    ]
    market_position = [
        MarketPositionPoint(metric="Profitability", company=profitability, sector=sector_profitability),
        MarketPositionPoint(metric="Efficiency", company=efficiency, sector=sector_efficiency),
        MarketPositionPoint(metric="Growth", company=health_score.growth, sector=sector_data.growth_rate),
        MarketPositionPoint(metric="Size", company=company.employees, sector=sector_data.average_employees),
    ]

    return AnalysisDelta(
        competitive_position=CompetitivePosition(),
        recommendations=Recommendations(),
        charts=Charts(
            revenue_comparison=revenue_comparison,
            profitability_trend=profitability_trend,
            market_position=market_position,
        ),
    )


def build_fallback_analysis(company: CompanyData) -> ComparativeAnalysis:
    """Full demo analysis for `company`; its figures are kept untouched."""
    sector_data = fallback_sector_data(company.sector)
    health_score = fallback_health_score()
    delta = fallback_analysis_delta(company, sector_data, health_score)
    return ComparativeAnalysis.assemble(company, sector_data, health_score, delta)

"""
Insights derived from a comparative analysis.
"""

import pytest

from prediktor.agents.fallback import build_fallback_analysis
from prediktor.agents.insights import MAX_PROJECTED_GROWTH, build_insights, risk_level


# ─── Fixtures ────────────────────────────────────────────────────────────────

@pytest.fixture
def analysis(commerce_company):
    return build_fallback_analysis(commerce_company)


def _with_growth(analysis, sector_growth, company_growth):
    sector = analysis.sector_data.model_copy(update={"growth_rate": sector_growth})
    health = analysis.health_score.model_copy(update={"growth": company_growth})
    return analysis.model_copy(update={"sector_data": sector, "health_score": health})


# ─── Tests ───────────────────────────────────────────────────────────────────

class TestGrowthProjections:
    def test_twenty_five_months(self, analysis):
        projections = build_insights(analysis).growth_data.monthly_projections
        assert len(projections) == 25
        assert projections[0].month == "M-12"
        assert projections[12].month == "M"
        assert projections[-1].month == "M+12"

    def test_projection_is_one_and_a_half_times_sector_growth(self, analysis):
        growth = build_insights(_with_growth(analysis, 12, 65)).growth_data
        assert growth.current == 12
        assert growth.projected_12_months == 18
        assert growth.evolution_12_months == 6
        assert growth.monthly_projections[0].growth == 12
        assert growth.monthly_projections[-1].growth == 18
        assert growth.min_growth == 12
        assert growth.max_growth == 18

    def test_halves_round_up(self, analysis):
        growth = build_insights(_with_growth(analysis, 0.25, 65)).growth_data
        assert growth.monthly_projections[0].growth == 0.3
        assert growth.min_growth == 0.3

    def test_projection_is_capped(self, analysis):
        growth = build_insights(_with_growth(analysis, 40, 65)).growth_data
        assert growth.projected_12_months == MAX_PROJECTED_GROWTH

    def test_negative_growth_floors_at_zero(self, analysis):
        growth = build_insights(_with_growth(analysis, -4, 0)).growth_data
        assert all(p.growth >= 0 for p in growth.monthly_projections)


class TestBenchmark:
    @pytest.mark.parametrize("gap, expected", [(10, "Low"), (5, "Moderate"), (0.5, "Moderate"), (0, "High"), (-3, "High")])
    def test_risk_level(self, gap, expected):
        assert risk_level(gap) == expected

    def test_gap_is_company_minus_sector(self, analysis):
        benchmark = build_insights(_with_growth(analysis, 12, 20)).benchmark_data
        assert benchmark.gap == 8
        assert benchmark.risk_level == "Low"
        assert [i.indicator for i in benchmark.indicators] == ["Growth", "Profitability", "Risk"]

    def test_scores_are_clamped(self, analysis):
        scores = build_insights(_with_growth(analysis, 12, 100)).ai_scores
        assert scores.risk_percentage == 0
        assert scores.objective_probability == 95

        scores = build_insights(_with_growth(analysis, 30, 0)).ai_scores
        assert scores.risk_percentage == 100
        assert scores.objective_probability == 50


class TestMetadata:
    def test_demo_flag_and_names(self, analysis):
        insights = build_insights(analysis, is_demo_data=True, company_name="Kone Distribution")
        assert insights.metadata.is_demo_data is True
        assert insights.metadata.company_name == "Kone Distribution"
        assert insights.metadata.sector == "Commerce"

    def test_company_name_defaults_to_sector(self, analysis):
        assert build_insights(analysis).metadata.company_name == "Commerce"

    def test_scorecards_use_first_recommendation_and_opportunity(self, analysis):
        scores = build_insights(analysis).ai_scores
        assert scores.recommendation.title == analysis.recommendations.immediate[0]
        assert scores.opportunity.title == analysis.sector_data.opportunities[0]

    def test_document_uses_wire_names(self, analysis):
        document = build_insights(analysis).to_document()
        assert "projected12Months" in document["growthData"]
        assert "isDemoData" in document["metadata"]

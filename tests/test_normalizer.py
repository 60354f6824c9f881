"""
Response cleaning and lenient validation of generated records.
"""

import pytest

from prediktor.agents.errors import InvalidResponseError
from prediktor.agents.normalizer import clean_json_response, parse_json_response, parse_model
from prediktor.models.schemas import (
    PENDING_CONTENT,
    AnalysisDelta,
    GeneratedBusinessPlan,
    HealthScore,
    KeyMetrics,
    SectorData,
)


class TestCleanJsonResponse:
    def test_strips_markdown_fences(self):
        assert clean_json_response('```json\n{"a": 1}\n```') == '{"a": 1}'

    def test_strips_bare_fences(self):
        assert clean_json_response('```\n{"a": 1}\n```') == '{"a": 1}'

    def test_slices_out_surrounding_prose(self):
        text = 'Here is the analysis: {"a": {"b": 2}} Let me know if you need more.'
        assert clean_json_response(text) == '{"a": {"b": 2}}'

    def test_plain_json_untouched(self):
        assert clean_json_response('  {"a": 1}  ') == '{"a": 1}'


class TestParseJsonResponse:
    def test_invalid_json_raises(self):
        with pytest.raises(InvalidResponseError) as exc:
            parse_json_response("{not json}")
        assert exc.value.raw_text == "{not json}"

    def test_empty_text_raises(self):
        with pytest.raises(InvalidResponseError):
            parse_json_response("   ")

    def test_fenced_json_decodes(self):
        assert parse_json_response('```json\n{"growthRate": 9}\n```') == {"growthRate": 9}

    @pytest.mark.parametrize("constant", ["NaN", "Infinity", "-Infinity"])
    def test_non_finite_constants_rejected(self, constant):
        with pytest.raises(InvalidResponseError):
            parse_json_response(f'{{"growthRate": {constant}}}')


class TestLenientModels:
    def test_non_object_root_gives_defaults(self):
        data = parse_model("[1, 2, 3]", SectorData)
        assert data == SectorData()

    def test_wrong_types_fall_back_per_field(self):
        text = '{"sector": 42, "growthRate": "12%", "trends": "digital", "keyMetrics": 5}'
        data = parse_model(text, SectorData)
        defaults = SectorData()
        assert data.sector == defaults.sector
        assert data.growth_rate == defaults.growth_rate
        assert data.trends == defaults.trends
        assert data.key_metrics == KeyMetrics()

    def test_valid_fields_are_kept(self):
        data = parse_model('{"sector": "Commerce", "growthRate": 7.5, "marketSize": 0}', SectorData)
        assert data.sector == "Commerce"
        assert data.growth_rate == 7.5
        assert data.market_size == 0

    def test_overflowing_numbers_fall_back(self):
        data = parse_model('{"growthRate": 1e400, "marketSize": 12}', SectorData)
        assert data.growth_rate == SectorData().growth_rate
        assert data.market_size == 12

    def test_booleans_are_not_numbers(self):
        data = parse_model('{"overall": true, "growth": 40}', HealthScore)
        assert data.overall == HealthScore().overall
        assert data.growth == 40

    def test_string_list_keeps_length(self):
        data = parse_model('{"trends": ["a", 3, {"b": 1.0, "c": [2.5, null]}]}', SectorData)
        assert data.trends == ["a", "3", '{"b":1,"c":[2.5,null]}']

    def test_nested_metrics_partially_filled(self):
        data = parse_model('{"keyMetrics": {"profitability": 22, "marketShare": "big"}}', SectorData)
        assert data.key_metrics.profitability == 22
        assert data.key_metrics.efficiency == KeyMetrics().efficiency
        assert data.key_metrics.market_share == KeyMetrics().market_share

    def test_unknown_position_uses_default(self):
        delta = parse_model('{"competitivePosition": {"position": "dominant", "score": 91}}', AnalysisDelta)
        assert delta.competitive_position.position == "strong"
        assert delta.competitive_position.score == 91

    def test_empty_chart_series_gets_default_series(self):
        delta = parse_model('{"charts": {"revenueComparison": []}}', AnalysisDelta)
        assert len(delta.charts.revenue_comparison) == 4
        assert delta.charts.revenue_comparison[0].label == "Revenue"

    def test_non_record_chart_points_keep_position(self):
        delta = parse_model(
            '{"charts": {"profitabilityTrend": [1, {"company": 5, "sector": 4, "period": "Q1"}]}}',
            AnalysisDelta,
        )
        trend = delta.charts.profitability_trend
        assert len(trend) == 2
        assert trend[0].period == "Current"
        assert trend[0].company == 0
        assert trend[1].company == 5


class TestBusinessPlanNormalization:
    def test_missing_sections_get_titles_and_placeholder(self):
        plan = parse_model(
            '{"executiveSummary": {"content": "Hello"}, "marketAnalysis": "oops"}',
            GeneratedBusinessPlan,
            context={"company_name": "Acme Foods", "industry": "Food"},
        )
        assert plan.executive_summary.title == "Executive Summary"
        assert plan.executive_summary.content == "Hello"
        assert plan.market_analysis.title == "Market Analysis"
        assert plan.market_analysis.content == PENDING_CONTENT
        assert plan.funding.title == "Funding Request"
        assert plan.appendices is None

    def test_metadata_falls_back_to_request(self):
        plan = parse_model(
            '{"metadata": {"industry": 3, "totalPages": "many"}}',
            GeneratedBusinessPlan,
            context={"company_name": "Acme Foods", "industry": "Food"},
        )
        assert plan.metadata.company_name == "Acme Foods"
        assert plan.metadata.industry == "Food"
        assert plan.metadata.total_pages == 25
        assert plan.metadata.generated_at

    def test_missing_metadata_uses_request(self):
        plan = parse_model("{}", GeneratedBusinessPlan, context={"company_name": "Acme", "industry": "Food"})
        assert plan.metadata.company_name == "Acme"
        assert plan.metadata.industry == "Food"

    def test_model_metadata_wins_when_string(self):
        plan = parse_model(
            '{"metadata": {"companyName": "Acme SARL"}}',
            GeneratedBusinessPlan,
            context={"company_name": "Acme", "industry": "Food"},
        )
        assert plan.metadata.company_name == "Acme SARL"

    def test_null_subsections_become_empty(self):
        plan = parse_model('{"funding": {"content": "50M", "subsections": null}}', GeneratedBusinessPlan)
        assert plan.funding.subsections == []

    def test_appendices_kept_when_present(self):
        plan = parse_model('{"appendices": {"content": "Extra"}}', GeneratedBusinessPlan)
        assert plan.appendices.title == "Appendices"
        assert [name for name, _ in plan.sections()][-1] == "appendices"
        assert len(plan.sections()) == 9

"""
Comparative analysis: live path, demo fallback, action plans and business plans.
"""

from unittest.mock import MagicMock

import pytest
import requests

from prediktor.agents.analyst import AnalysisService
from prediktor.agents.base import Demo, Live, Orchestrator, outcome_document
from prediktor.agents.business_plan import BusinessPlanService
from prediktor.agents.errors import GeminiHTTPError, InvalidResponseError, QuotaExceededError
from prediktor.agents.fallback import build_fallback_analysis, trend_periods
from prediktor.agents.gemini import GeminiClient
from prediktor.agents.prompts import ProfileContext, comparative_analysis_prompt, sector_data_prompt
from prediktor.config.settings import Settings
from prediktor.models.schemas import (
    BusinessPlanRequest,
    CompanyData,
    HealthScore,
    SectorData,
    UserProfile,
)

SECTOR_JSON = (
    '{"sector": "Commerce", "averageRevenue": 8000000, "averageExpenses": 6000000, '
    '"averageEmployees": 12, "growthRate": 9, "marketSize": 900000000, '
    '"keyMetrics": {"profitability": 18, "efficiency": 70, "marketShare": 4}, '
    '"trends": ["Mobile money"], "challenges": ["Informal competition"], '
    '"opportunities": ["E-commerce"]}'
)
HEALTH_JSON = (
    '```json\n{"overall": 68, "profitability": 72, "efficiency": 60, "growth": 55, '
    '"marketPosition": 64, "details": {"strengths": ["Margin"], "weaknesses": ["Size"], '
    '"recommendations": ["Hire"]}}\n```'
)
POSITION_JSON = (
    'Sure! {"competitivePosition": {"score": 64, "position": "average", '
    '"description": "Mid-pack"}, "recommendations": {"immediate": ["Cut costs"], '
    '"shortTerm": ["Open a shop"], "longTerm": ["Export"]}, '
    '"charts": {"revenueComparison": [{"company": 5000000, "sector": 8000000, "label": "Revenue"}]}}'
)


# ─── Fixtures ────────────────────────────────────────────────────────────────

@pytest.fixture
def live_client(scripted_client):
    return scripted_client(SECTOR_JSON, HEALTH_JSON, POSITION_JSON)


@pytest.fixture
def profile():
    return UserProfile(
        first_name="Awa", last_name="Kone", company_name="Kone Distribution",
        industry="Commerce", country="Senegal", currency="XOF",
    )


# ─── Live Path ───────────────────────────────────────────────────────────────

class TestLiveAnalysis:
    def test_three_calls_assemble_analysis(self, live_client, commerce_company):
        outcome = AnalysisService(live_client).generate_comparative_analysis(commerce_company)

        assert isinstance(outcome, Live)
        assert outcome.is_demo_data is False
        analysis = outcome.analysis
        assert analysis.company_data == commerce_company
        assert analysis.sector_data.growth_rate == 9
        assert analysis.health_score.overall == 68
        assert analysis.competitive_position.position == "average"
        assert analysis.recommendations.short_term == ["Open a shop"]
        assert len(analysis.charts.revenue_comparison) == 1
        assert len(live_client.prompts) == 3

    def test_prompts_carry_profile_context(self, live_client, commerce_company, profile):
        AnalysisService(live_client).generate_comparative_analysis(commerce_company, profile)
        sector_prompt = live_client.prompts[0]
        assert "Senegal" in sector_prompt
        assert "XOF" in sector_prompt
        assert "Commerce" in sector_prompt

    def test_outcome_document_flags_live_data(self, live_client, commerce_company):
        outcome = AnalysisService(live_client).generate_comparative_analysis(commerce_company)
        document = outcome_document(outcome)
        assert document["isDemoData"] is False
        assert document["companyData"]["revenue"] == 5_000_000
        assert "healthScore" in document

    def test_single_steps(self, scripted_client, commerce_company):
        service = AnalysisService(scripted_client(SECTOR_JSON, HEALTH_JSON))
        sector = service.analyze_sector_data("Commerce")
        health = service.calculate_health_score(commerce_company, sector)
        assert sector.average_employees == 12
        assert health.details.strengths == ["Margin"]


# ─── Demo Fallback ───────────────────────────────────────────────────────────

class TestDemoFallback:
    @pytest.mark.parametrize("failure", [
        QuotaExceededError(),
        GeminiHTTPError(500),
        InvalidResponseError("bad json"),
    ])
    def test_any_failure_yields_demo(self, scripted_client, commerce_company, failure):
        outcome = AnalysisService(scripted_client(failure)).generate_comparative_analysis(
            commerce_company
        )
        assert isinstance(outcome, Demo)
        assert outcome.is_demo_data is True
        assert outcome.error
        assert outcome.analysis.company_data == commerce_company

    def test_failure_in_last_step(self, scripted_client, commerce_company):
        client = scripted_client(SECTOR_JSON, HEALTH_JSON, "no json here")
        outcome = AnalysisService(client).generate_comparative_analysis(commerce_company)
        assert isinstance(outcome, Demo)
        # Demo data never mixes in partial live results
        assert outcome.analysis.sector_data == SectorData(sector="Commerce")


def _http_response(status_code=200, body=None):
    resp = MagicMock()
    resp.status_code = status_code
    resp.ok = 200 <= status_code < 400
    resp.text = ""
    resp.json.return_value = body
    return resp


def _candidate(text):
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


class TestDemoFallbackOverHTTP:
    """Real GeminiClient over a mocked requests session."""

    @pytest.fixture
    def http(self):
        http = MagicMock(spec=requests.Session)
        http.headers = {}
        return http

    def _analyze(self, http, company, api_key="test-key"):
        client = GeminiClient(api_key=api_key, config=Settings(), session=http)
        return AnalysisService(client).generate_comparative_analysis(company)

    def _assert_demo(self, outcome, company):
        assert isinstance(outcome, Demo)
        assert outcome_document(outcome)["isDemoData"] is True
        assert outcome.analysis.company_data == company
        assert outcome.analysis.sector_data == SectorData(sector=company.sector)

    def test_missing_api_key(self, http, commerce_company):
        outcome = self._analyze(http, commerce_company, api_key="")
        self._assert_demo(outcome, commerce_company)
        http.post.assert_not_called()

    def test_quota_exceeded(self, http, commerce_company):
        http.post.return_value = _http_response(status_code=429)
        self._assert_demo(self._analyze(http, commerce_company), commerce_company)

    def test_transport_error(self, http, commerce_company):
        http.post.side_effect = requests.RequestException("connection reset")
        outcome = self._analyze(http, commerce_company)
        self._assert_demo(outcome, commerce_company)
        assert "connection reset" in outcome.error

    def test_invalid_envelope(self, http, commerce_company):
        http.post.return_value = _http_response(body={"candidates": []})
        self._assert_demo(self._analyze(http, commerce_company), commerce_company)

    @pytest.mark.parametrize("constant", ["NaN", "Infinity", "-Infinity"])
    def test_non_finite_number_in_reply(self, http, commerce_company, constant):
        reply = SECTOR_JSON.replace('"growthRate": 9', f'"growthRate": {constant}')
        http.post.return_value = _http_response(body=_candidate(reply))
        outcome = self._analyze(http, commerce_company)

        self._assert_demo(outcome, commerce_company)
        assert http.post.call_count == 1

    def test_successful_reply_is_live(self, http, commerce_company):
        http.post.side_effect = [
            _http_response(body=_candidate(text))
            for text in (SECTOR_JSON, HEALTH_JSON, POSITION_JSON)
        ]
        outcome = self._analyze(http, commerce_company)
        assert isinstance(outcome, Live)
        assert outcome.analysis.sector_data.growth_rate == 9

    def test_trend_follows_company_margin(self, commerce_company):
        analysis = build_fallback_analysis(commerce_company)
        trend = analysis.charts.profitability_trend
        assert [p.period for p in trend] == ["2022", "2023", "2024", "2025"]
        assert [p.company for p in trend] == pytest.approx([24, 27, 30, 33])
        assert [p.sector for p in trend] == pytest.approx([13.5, 14.25, 15, 15.75])

    def test_revenue_comparison_uses_company_figures(self, commerce_company):
        points = build_fallback_analysis(commerce_company).charts.revenue_comparison
        assert [p.label for p in points] == ["Revenue", "Expenses", "Profit", "Revenue/Employee"]
        assert points[0].company == 5_000_000
        assert points[2].company == 1_500_000
        assert points[3].company == 500_000

    def test_zero_revenue_and_employees(self):
        company = CompanyData(year="2023", revenue=0, expenses=0, employees=0, sector="Services")
        analysis = build_fallback_analysis(company)
        assert all(p.company == 0 for p in analysis.charts.profitability_trend)
        assert analysis.charts.revenue_comparison[3].company == 0
        assert analysis.health_score == HealthScore()

    def test_outcome_document_flags_demo_data(self, commerce_company):
        document = outcome_document(Demo(analysis=build_fallback_analysis(commerce_company)))
        assert document["isDemoData"] is True

    @pytest.mark.parametrize("year, expected", [
        ("2024", ["2022", "2023", "2024", "2025"]),
        ("2019", ["2017", "2018", "2019", "2020"]),
        ("FY24", ["2022", "2023", "2024", "2025"]),
    ])
    def test_trend_periods(self, year, expected):
        assert trend_periods(year) == expected


# ─── Orchestrator ────────────────────────────────────────────────────────────

class TestOrchestrator:
    def test_stops_on_first_failure(self, scripted_client, commerce_company):
        service = AnalysisService(scripted_client(SECTOR_JSON, GeminiHTTPError(503)))
        outcome = service.generate_comparative_analysis(commerce_company)
        assert isinstance(outcome, Demo)
        assert "503" in outcome.error

    def test_summary_lists_agents(self):
        orchestrator = Orchestrator([])
        assert orchestrator.summary() == "Pipeline Summary:"


# ─── Prompts ─────────────────────────────────────────────────────────────────

class TestPrompts:
    def test_default_context_without_profile(self):
        ctx = ProfileContext.from_profile(None)
        assert ctx.country == "Côte d'Ivoire"
        assert ctx.currency == "FCFA"

    def test_sector_prompt_asks_for_json(self):
        prompt = sector_data_prompt("Agriculture", ProfileContext.from_profile(None))
        assert "Agriculture" in prompt
        assert "averageRevenue" in prompt

    def test_comparative_prompt_example_uses_company_margin(self, commerce_company):
        prompt = comparative_analysis_prompt(
            commerce_company, SectorData(), HealthScore(), ProfileContext.from_profile(None)
        )
        # 30% margin scaled by 0.8 for the first period
        assert '"company": 24,' in prompt
        assert "Revenue: 5,000,000 FCFA" in prompt


# ─── Action & Business Plans ─────────────────────────────────────────────────

class TestPlans:
    def test_action_plan_parsed(self, scripted_client, commerce_company):
        client = scripted_client('{"objectives": ["Grow"], "actions": [{"category": "Sales"}]}')
        plan = AnalysisService(client).generate_action_plan(build_fallback_analysis(commerce_company))
        assert plan.objectives == ["Grow"]
        assert plan.actions[0].category == "Sales"
        assert len(plan.timeline) == 3

    def test_action_plan_propagates_errors(self, scripted_client, commerce_company):
        service = AnalysisService(scripted_client(QuotaExceededError()))
        with pytest.raises(QuotaExceededError):
            service.generate_action_plan(build_fallback_analysis(commerce_company))

    def test_business_plan_uses_request_metadata(self, scripted_client):
        client = scripted_client('{"executiveSummary": {"title": "Summary", "content": "We sell."}}')
        request = BusinessPlanRequest(company_name="Acme Foods", industry="Food")
        plan = BusinessPlanService(client).generate_business_plan(request)
        assert plan.executive_summary.title == "Summary"
        assert plan.metadata.company_name == "Acme Foods"
        assert plan.metadata.industry == "Food"
        assert "Acme Foods" in client.prompts[0]

    def test_business_plan_propagates_errors(self, scripted_client):
        service = BusinessPlanService(scripted_client(GeminiHTTPError(500)))
        with pytest.raises(GeminiHTTPError):
            service.generate_business_plan(BusinessPlanRequest(company_name="A", industry="B"))

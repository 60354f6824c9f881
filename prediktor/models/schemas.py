"""
Core data models / schemas for Prediktor.

Python attributes are snake_case; the wire and stored form is camelCase
(`companyData`, `averageRevenue`, ...). Records produced by the generative
API are validated leniently: see `models.coercion`.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, model_validator
from pydantic.alias_generators import to_camel

from prediktor.models.coercion import (
    choice_fields,
    number_fields,
    object_fields,
    object_list_fields,
    string_fields,
    string_list_fields,
)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def iso_now() -> str:
    return utc_now().isoformat()


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_document(self) -> Dict[str, Any]:
        """JSON-safe, camelCase dict as stored and served."""
        return self.model_dump(mode="json", by_alias=True)


# ---------------------------------------------------------------------------
# User input
# ---------------------------------------------------------------------------

class CompanyData(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    year: str
    revenue: float = Field(ge=0)
    expenses: float = Field(ge=0)
    employees: int = Field(ge=0)
    sector: str
    market: str = ""


# ---------------------------------------------------------------------------
# Sector data & health score
# ---------------------------------------------------------------------------

class KeyMetrics(CamelModel):
    profitability: float = 15
    efficiency: float = 75
    market_share: float = 8

    check_numbers = number_fields("profitability", "efficiency", "market_share")


class SectorData(CamelModel):
    sector: str = "Sector"
    average_revenue: float = 50_000_000
    average_expenses: float = 35_000_000
    average_employees: float = 25
    growth_rate: float = 12
    market_size: float = 5_000_000_000
    key_metrics: KeyMetrics = Field(default_factory=KeyMetrics)
    trends: List[str] = Field(default_factory=lambda: [
        "Accelerating digitalisation", "Local investment", "Technological innovation",
    ])
    challenges: List[str] = Field(default_factory=lambda: [
        "Access to financing", "Limited infrastructure", "International competition",
    ])
    opportunities: List[str] = Field(default_factory=lambda: [
        "Growing market", "Digital development", "Local partnerships",
    ])

    check_strings = string_fields("sector")
    check_numbers = number_fields(
        "average_revenue", "average_expenses", "average_employees",
        "growth_rate", "market_size",
    )
    check_objects = object_fields("key_metrics")
    check_lists = string_list_fields("trends", "challenges", "opportunities")


class HealthDetails(CamelModel):
    strengths: List[str] = Field(default_factory=lambda: [
        "Above-average profitability", "Operational efficiency",
    ])
    weaknesses: List[str] = Field(default_factory=lambda: [
        "Limited team size", "Untapped growth potential",
    ])
    recommendations: List[str] = Field(default_factory=lambda: [
        "Invest in growth", "Streamline processes",
    ])

    check_lists = string_list_fields("strengths", "weaknesses", "recommendations")


class HealthScore(CamelModel):
    overall: float = 75
    profitability: float = 80
    efficiency: float = 70
    growth: float = 65
    market_position: float = 75
    details: HealthDetails = Field(default_factory=HealthDetails)

    check_numbers = number_fields(
        "overall", "profitability", "efficiency", "growth", "market_position",
    )
    check_objects = object_fields("details")


# ---------------------------------------------------------------------------
# Comparative analysis
# ---------------------------------------------------------------------------

POSITIONS: Tuple[str, ...] = ("leader", "strong", "average", "weak", "struggling")
Position = Literal["leader", "strong", "average", "weak", "struggling"]


class CompetitivePosition(CamelModel):
    score: float = 75
    position: Position = "strong"
    description: str = "Solid competitive position with room for improvement"

    check_numbers = number_fields("score")
    check_choices = choice_fields("position", choices=POSITIONS)
    check_strings = string_fields("description")


class Recommendations(CamelModel):
    immediate: List[str] = Field(default_factory=lambda: [
        "Reduce operating costs", "Strengthen the digital presence",
    ])
    short_term: List[str] = Field(default_factory=lambda: [
        "Develop new markets", "Invest in staff training",
    ])
    long_term: List[str] = Field(default_factory=lambda: [
        "Geographic expansion", "Product innovation",
    ])

    check_lists = string_list_fields("immediate", "short_term", "long_term")


class RevenuePoint(CamelModel):
    company: float = 0
    sector: float = 0
    label: str = "Revenue"

    check_numbers = number_fields("company", "sector")
    check_strings = string_fields("label")


class TrendPoint(CamelModel):
    company: float = 0
    sector: float = 0
    period: str = "Current"

    check_numbers = number_fields("company", "sector")
    check_strings = string_fields("period")


class MarketPositionPoint(CamelModel):
    metric: str = "Metric"
    company: float = 0
    sector: float = 0

    check_numbers = number_fields("company", "sector")
    check_strings = string_fields("metric")


class Charts(CamelModel):
    revenue_comparison: List[RevenuePoint] = Field(default_factory=lambda: [
        RevenuePoint(company=5_000_000, sector=8_000_000, label="Revenue"),
        RevenuePoint(company=3_500_000, sector=6_000_000, label="Expenses"),
        RevenuePoint(company=1_500_000, sector=2_000_000, label="Profit"),
        RevenuePoint(company=250_000, sector=320_000, label="Revenue/Employee"),
    ])
    profitability_trend: List[TrendPoint] = Field(default_factory=lambda: [
        TrendPoint(company=18, sector=15, period="2022"),
        TrendPoint(company=20, sector=16, period="2023"),
        TrendPoint(company=22, sector=17, period="2024"),
        TrendPoint(company=25, sector=18, period="2025"),
    ])
    market_position: List[MarketPositionPoint] = Field(default_factory=lambda: [
        MarketPositionPoint(metric="Profitability", company=22, sector=17),
        MarketPositionPoint(metric="Efficiency", company=250_000, sector=320_000),
        MarketPositionPoint(metric="Growth", company=15, sector=12),
        MarketPositionPoint(metric="Size", company=20, sector=25),
    ])

    check_series = object_list_fields(
        "revenue_comparison", "profitability_trend", "market_position", non_empty=True,
    )


class AnalysisDelta(CamelModel):
    """The part of a comparative analysis the positioning prompt produces."""
    competitive_position: CompetitivePosition = Field(default_factory=CompetitivePosition)
    recommendations: Recommendations = Field(default_factory=Recommendations)
    charts: Charts = Field(default_factory=Charts)

    check_objects = object_fields("competitive_position", "recommendations", "charts")


class ComparativeAnalysis(CamelModel):
    company_data: CompanyData
    sector_data: SectorData
    health_score: HealthScore
    competitive_position: CompetitivePosition = Field(default_factory=CompetitivePosition)
    recommendations: Recommendations = Field(default_factory=Recommendations)
    charts: Charts = Field(default_factory=Charts)

    @classmethod
    def assemble(
        cls,
        company_data: CompanyData,
        sector_data: SectorData,
        health_score: HealthScore,
        delta: AnalysisDelta,
    ) -> "ComparativeAnalysis":
        return cls(
            company_data=company_data,
            sector_data=sector_data,
            health_score=health_score,
            competitive_position=delta.competitive_position,
            recommendations=delta.recommendations,
            charts=delta.charts,
        )


# ---------------------------------------------------------------------------
# Action plan
# ---------------------------------------------------------------------------

class ActionCategory(CamelModel):
    category: str = "Category"
    actions: List[str] = Field(default_factory=lambda: ["Action 1", "Action 2", "Action 3"])

    check_strings = string_fields("category")
    check_lists = string_list_fields("actions")


class TimelinePhase(CamelModel):
    phase: str = "Phase"
    duration: str = "1-3 months"
    actions: List[str] = Field(default_factory=lambda: ["Action 1", "Action 2", "Action 3"])

    check_strings = string_fields("phase", "duration")
    check_lists = string_list_fields("actions")


class ActionPlan(CamelModel):
    objectives: List[str] = Field(default_factory=lambda: [
        "Grow revenue by 25% within 12 months by opening new markets",
        "Cut operating costs by 15% by streamlining processes",
        "Raise customer satisfaction by 30% through staff training",
    ])
    actions: List[ActionCategory] = Field(default_factory=lambda: [
        ActionCategory(category="Marketing", actions=[
            "Launch a targeted social media campaign towards prospective customers",
            "Build a responsive website with online booking",
            "Exhibit at three regional trade fairs",
        ]),
        ActionCategory(category="Operations", actions=[
            "Automate invoicing with management software",
            "Negotiate contracts with three new local suppliers",
            "Rework shift schedules to lower energy costs",
        ]),
        ActionCategory(category="Finance", actions=[
            "Secure a 50M FCFA bank loan for expansion",
            "Set up monthly budget tracking",
            "Diversify revenue with complementary services",
        ]),
        ActionCategory(category="Human Resources", actions=[
            "Train five employees in modern sales techniques",
            "Hire a sector expert with five years of experience",
            "Introduce a performance-based bonus scheme",
        ]),
    ])
    timeline: List[TimelinePhase] = Field(default_factory=lambda: [
        TimelinePhase(phase="Phase 1 - Immediate actions", duration="1-3 months", actions=[
            "Audit current processes and identify bottlenecks",
            "Train the team on new digital tools",
            "Launch the digital marketing campaign with a 2M FCFA budget",
        ]),
        TimelinePhase(phase="Phase 2 - Development", duration="3-6 months", actions=[
            "Open two new points of sale in high-potential areas",
            "Optimise production to cut costs by 10%",
            "Recruit and train three qualified employees",
        ]),
        TimelinePhase(phase="Phase 3 - Expansion", duration="6-12 months", actions=[
            "Expand into two new regions with local partners",
            "Launch three new products or services",
            "Form a strategic partnership with a sector leader",
        ]),
    ])

    check_lists = string_list_fields("objectives")
    check_objects = object_list_fields("actions", "timeline")


# ---------------------------------------------------------------------------
# Business plan
# ---------------------------------------------------------------------------

SECTION_TITLES: Dict[str, str] = {
    "executive_summary": "Executive Summary",
    "company_description": "Company Description",
    "market_analysis": "Market Analysis",
    "organization": "Organization and Management",
    "products_services": "Products and Services",
    "marketing_sales": "Marketing and Sales",
    "financial_projections": "Financial Projections",
    "funding": "Funding Request",
    "appendices": "Appendices",
}

PENDING_CONTENT = "Content being generated..."


class SectionToggles(CamelModel):
    executive_summary: bool = True
    company_description: bool = True
    market_analysis: bool = True
    organization: bool = True
    products_services: bool = True
    marketing_sales: bool = True
    financial_projections: bool = True
    funding: bool = True
    appendices: bool = False

    def enabled(self) -> List[str]:
        return [name for name, on in self.model_dump().items() if on]


class BusinessPlanRequest(CamelModel):
    company_name: str
    industry: str
    description: str = ""
    market_size: str = ""
    target_market: str = ""
    competitive_advantage: str = ""
    revenue_model: str = ""
    funding_required: str = ""
    team_size: str = ""
    timeline: str = ""
    sections: SectionToggles = Field(default_factory=SectionToggles)


class Subsection(CamelModel):
    title: str = "Subsection"
    content: str = PENDING_CONTENT

    check_strings = string_fields("title", "content")


class BusinessPlanSection(CamelModel):
    title: str = "Section"
    content: str = PENDING_CONTENT
    subsections: Optional[List[Subsection]] = Field(default_factory=list)

    check_strings = string_fields("title", "content")
    check_objects = object_list_fields("subsections")


class BusinessPlanMetadata(CamelModel):
    generated_at: str = Field(default_factory=iso_now)
    company_name: str = ""
    industry: str = ""
    total_pages: float = 25

    check_strings = string_fields("generated_at", "company_name", "industry")
    check_numbers = number_fields("total_pages")

    @model_validator(mode="before")
    @classmethod
    def fill_from_request(cls, data: Any, info: ValidationInfo) -> Any:
        """Missing or non-string name/industry come from the validation context."""
        if not isinstance(data, dict) or not info.context:
            return data
        data = dict(data)
        for name in ("company_name", "industry"):
            alias = to_camel(name)
            key = alias if alias in data else name
            fallback = info.context.get(name)
            if not isinstance(data.get(key), str) and isinstance(fallback, str):
                data.pop(key, None)
                data[alias] = fallback
        return data


class GeneratedBusinessPlan(CamelModel):
    executive_summary: BusinessPlanSection
    company_description: BusinessPlanSection
    market_analysis: BusinessPlanSection
    organization: BusinessPlanSection
    products_services: BusinessPlanSection
    marketing_sales: BusinessPlanSection
    financial_projections: BusinessPlanSection
    funding: BusinessPlanSection
    appendices: Optional[BusinessPlanSection] = None
    metadata: BusinessPlanMetadata = Field(default_factory=BusinessPlanMetadata)

    check_objects = object_fields("metadata")

    @model_validator(mode="before")
    @classmethod
    def fill_sections(cls, data: Any) -> Any:
        """Give every missing or malformed section its own default title."""
        if not isinstance(data, dict):
            return data
        data = dict(data)
        for name, default_title in SECTION_TITLES.items():
            alias = to_camel(name)
            key = alias if alias in data else name
            raw = data.get(key)
            if name == "appendices" and not raw:
                data.pop(key, None)
                continue
            if isinstance(raw, BaseModel):
                continue
            section = dict(raw) if isinstance(raw, dict) else {}
            if not isinstance(section.get("title"), str):
                section["title"] = default_title
            data[key] = section
        if not isinstance(data.get("metadata"), (dict, BaseModel)):
            data["metadata"] = {}
        return data

    def sections(self) -> List[Tuple[str, BusinessPlanSection]]:
        """Sections in document order, appendices last when present."""
        ordered = []
        for name in SECTION_TITLES:
            section = getattr(self, name)
            if section is not None:
                ordered.append((name, section))
        return ordered


# ---------------------------------------------------------------------------
# Insights
# ---------------------------------------------------------------------------

class MonthlyProjection(CamelModel):
    month: str
    growth: float


class GrowthData(CamelModel):
    current: float
    projected_12_months: float = Field(alias="projected12Months")
    min_growth: float
    max_growth: float
    evolution_12_months: float = Field(alias="evolution12Months")
    monthly_projections: List[MonthlyProjection]


class BenchmarkIndicator(CamelModel):
    indicator: str
    company: float
    sector: float


class BenchmarkData(CamelModel):
    company_growth: float
    sector_growth: float
    gap: float
    risk_level: str
    indicators: List[BenchmarkIndicator]


class ScoreCard(CamelModel):
    title: str
    description: str
    detail: str


class AIScores(CamelModel):
    risk_level: str
    risk_percentage: float
    risk_description: str
    objective_probability: float
    objective_description: str
    recommendation: ScoreCard
    opportunity: ScoreCard


class InsightMetadata(CamelModel):
    last_analysis_date: str = Field(default_factory=iso_now)
    company_name: str
    sector: str
    is_demo_data: bool = False


class InsightData(CamelModel):
    growth_data: GrowthData
    benchmark_data: BenchmarkData
    ai_scores: AIScores
    metadata: InsightMetadata


# ---------------------------------------------------------------------------
# User profile
# ---------------------------------------------------------------------------

REQUIRED_PROFILE_FIELDS: Tuple[str, ...] = (
    "first_name", "last_name", "company_name", "industry", "country",
)


class UserProfile(CamelModel):
    # Personal
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    phone: str = ""
    function: str = ""
    language: str = "fr"
    timezone: str = "Africa/Abidjan"

    # Company
    company_name: str = ""
    company_size: str = ""
    industry: str = ""
    country: str = ""
    currency: str = "FCFA"
    address: str = ""
    website: str = ""

    # Notifications
    email_notifications: bool = True
    push_notifications: bool = True
    weekly_reports: bool = True
    monthly_reports: bool = False

    # Integrations
    google_sheets: bool = False
    google_analytics: bool = False
    gemini_api: bool = True

    # Security
    two_factor_auth: bool = False
    session_timeout: str = "30"
    data_retention: str = "2"

    # Metadata
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
    is_profile_complete: bool = False


class UserProfileUpdate(CamelModel):
    """Partial update: only the fields the caller sends are applied."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    function: Optional[str] = None
    language: Optional[str] = None
    timezone: Optional[str] = None
    company_name: Optional[str] = None
    company_size: Optional[str] = None
    industry: Optional[str] = None
    country: Optional[str] = None
    currency: Optional[str] = None
    address: Optional[str] = None
    website: Optional[str] = None
    email_notifications: Optional[bool] = None
    push_notifications: Optional[bool] = None
    weekly_reports: Optional[bool] = None
    monthly_reports: Optional[bool] = None
    google_sheets: Optional[bool] = None
    google_analytics: Optional[bool] = None
    gemini_api: Optional[bool] = None
    two_factor_auth: Optional[bool] = None
    session_timeout: Optional[str] = None
    data_retention: Optional[str] = None

    def changes(self) -> Dict[str, Any]:
        return self.model_dump(exclude_unset=True, exclude_none=True)

"""
Prompt builders.

Every prompt embeds the typed inputs, the user's geographic/company context
and an example of the JSON shape expected back.
"""

import json
from dataclasses import dataclass
from typing import List, Optional

from pydantic.alias_generators import to_camel

from prediktor.config.settings import settings
from prediktor.models.schemas import (
    SECTION_TITLES,
    BusinessPlanRequest,
    CompanyData,
    ComparativeAnalysis,
    HealthScore,
    SectorData,
    UserProfile,
)
from prediktor.utils.validation import calculate_efficiency, calculate_profitability, round_half_up

JSON_ONLY_RULES = """CRITICAL INSTRUCTIONS:
- Answer ONLY with valid JSON
- NO text before or after the JSON
- NO markdown, backticks or code blocks
- NO explanations or comments
- Start directly with { and end with }"""


@dataclass
class ProfileContext:
    country: str
    currency: str
    company_name: str
    website: str = ""
    company_size: str = ""

    @classmethod
    def from_profile(cls, profile: Optional[UserProfile]) -> "ProfileContext":
        if profile is None:
            return cls(
                country=settings.DEFAULT_COUNTRY,
                currency=settings.DEFAULT_CURRENCY,
                company_name=settings.DEFAULT_COMPANY_NAME,
            )
        return cls(
            country=profile.country or settings.DEFAULT_COUNTRY,
            currency=profile.currency or settings.DEFAULT_CURRENCY,
            company_name=profile.company_name or settings.DEFAULT_COMPANY_NAME,
            website=profile.website,
            company_size=profile.company_size,
        )


def _amount(value: float) -> str:
    return f"{value:,.0f}"


def _joined(items: List[str]) -> str:
    return ", ".join(items) if items else "none"


def sector_data_prompt(sector: str, ctx: ProfileContext) -> str:
    example = {
        "sector": sector,
        "averageRevenue": 50000000,
        "averageExpenses": 35000000,
        "averageEmployees": 25,
        "growthRate": 12,
        "marketSize": 5000000000,
        "keyMetrics": {"profitability": 15, "efficiency": 75, "marketShare": 8},
        "trends": ["Accelerating digitalisation", "Local investment", "Technological innovation"],
        "challenges": ["Access to financing", "Limited infrastructure", "International competition"],
        "opportunities": ["Growing market", "Digital development", "Local partnerships"],
    }
    return f"""
You are a sector analysis expert. Analyse the "{sector}" sector in {ctx.country}.

{JSON_ONLY_RULES}
- IMPORTANT: adapt the figures to the economy of {ctx.country} and use {ctx.currency} as currency

GEOGRAPHIC AND ECONOMIC CONTEXT:
- Country: {ctx.country}
- Currency: {ctx.currency}
- Sector: {sector}

Expected answer (replace the values with realistic figures for "{sector}" in {ctx.country}):
{json.dumps(example, indent=2, ensure_ascii=False)}

REQUIRED ANSWER: JSON only, no extra formatting.
"""


def health_score_prompt(company: CompanyData, sector: SectorData, ctx: ProfileContext) -> str:
    example = {
        "overall": 75,
        "profitability": 80,
        "efficiency": 70,
        "growth": 65,
        "marketPosition": 75,
        "details": {
            "strengths": [f"Profitability above the {ctx.country} sector average", "Operational efficiency"],
            "weaknesses": ["Limited team size", "Untapped growth potential"],
            "recommendations": ["Invest in growth", "Streamline processes"],
        },
    }
    return f"""
You are a financial analysis expert. Compute a health score for a company.

{JSON_ONLY_RULES}
- IMPORTANT: adapt the analysis to {ctx.country} and use {ctx.currency}

COMPANY:
- Name: {ctx.company_name}
- Country: {ctx.country}
- Revenue: {_amount(company.revenue)} {ctx.currency}
- Expenses: {_amount(company.expenses)} {ctx.currency}
- Employees: {company.employees}
- Sector: {company.sector}

SECTOR DATA ({ctx.country}):
- Average revenue: {_amount(sector.average_revenue)} {ctx.currency}
- Average expenses: {_amount(sector.average_expenses)} {ctx.currency}
- Average employees: {sector.average_employees:g}
- Sector growth: {sector.growth_rate:g}%
- Market size: {_amount(sector.market_size)} {ctx.currency}

Expected answer:
{json.dumps(example, indent=2, ensure_ascii=False)}

REQUIRED ANSWER: JSON only, no extra formatting.
"""


def comparative_analysis_prompt(
    company: CompanyData,
    sector: SectorData,
    health: HealthScore,
    ctx: ProfileContext,
) -> str:
    raw_profitability = calculate_profitability(company.revenue, company.expenses)
    profitability = round_half_up(raw_profitability)
    sector_profitability = sector.key_metrics.profitability
    efficiency = round_half_up(calculate_efficiency(company.revenue, company.employees))
    sector_efficiency = round_half_up(calculate_efficiency(sector.average_revenue, sector.average_employees))
    example = {
        "competitivePosition": {
            "score": 75,
            "position": "strong",
            "description": "Solid competitive position with room for improvement",
        },
        "recommendations": {
            "immediate": ["Reduce operating costs", "Strengthen the digital presence"],
            "shortTerm": ["Develop new markets", "Invest in staff training"],
            "longTerm": ["Geographic expansion", "Product innovation"],
        },
        "charts": {
            "revenueComparison": [
                {"company": company.revenue, "sector": sector.average_revenue, "label": "Revenue"},
                {"company": company.expenses, "sector": sector.average_expenses, "label": "Expenses"},
                {"company": company.revenue - company.expenses,
                 "sector": sector.average_revenue - sector.average_expenses, "label": "Profit"},
                {"company": efficiency, "sector": sector_efficiency, "label": "Revenue/Employee"},
            ],
            "profitabilityTrend": [
                {"company": round_half_up(raw_profitability * 0.8), "sector": round_half_up(sector_profitability * 0.9), "period": "2022"},
                {"company": round_half_up(raw_profitability * 0.9), "sector": round_half_up(sector_profitability * 0.95), "period": "2023"},
                {"company": profitability, "sector": sector_profitability, "period": "2024"},
                {"company": round_half_up(raw_profitability * 1.1), "sector": round_half_up(sector_profitability * 1.05), "period": "2025"},
            ],
            "marketPosition": [
                {"metric": "Profitability", "company": profitability, "sector": sector_profitability},
                {"metric": "Efficiency", "company": efficiency, "sector": sector_efficiency},
                {"metric": "Growth", "company": health.growth, "sector": sector.growth_rate},
                {"metric": "Size", "company": company.employees, "sector": sector.average_employees},
            ],
        },
    }
    return f"""
You are a business strategy expert. Produce a complete comparative analysis.

{JSON_ONLY_RULES}
- IMPORTANT: ALWAYS produce complete chart data
- IMPORTANT: adapt the analysis to {ctx.country} and use {ctx.currency}
- "position" must be one of: leader, strong, average, weak, struggling

COMPANY:
- Name: {ctx.company_name}
- Country: {ctx.country}
- Website: {ctx.website or "Not provided"}
- Size: {ctx.company_size or "Not provided"}
- Revenue: {_amount(company.revenue)} {ctx.currency}
- Expenses: {_amount(company.expenses)} {ctx.currency}
- Employees: {company.employees}
- Sector: {company.sector}

Health score: {health.overall:g}/100

Expected answer (CONCRETE actions for the {company.sector} sector in {ctx.country}):
{json.dumps(example, indent=2, ensure_ascii=False)}

REQUIRED ANSWER: JSON only, no extra formatting.
"""


def action_plan_prompt(analysis: ComparativeAnalysis, ctx: ProfileContext) -> str:
    company = analysis.company_data
    sector = analysis.sector_data
    example = {
        "objectives": [
            f"Grow revenue by 25% within 12 months by opening 3 new markets in {ctx.country}",
            "Cut operating costs by 15% by optimising the supply chain",
        ],
        "actions": [
            {"category": "Marketing", "actions": [
                f"Run a targeted social media campaign towards {company.sector} customers in {ctx.country}",
            ]},
            {"category": "Operations", "actions": ["Automate invoicing with management software"]},
            {"category": "Finance", "actions": ["Set up monthly budget tracking"]},
            {"category": "Human Resources", "actions": [
                f"Hire a {company.sector} expert with 5 years of experience",
            ]},
        ],
        "timeline": [
            {"phase": "Phase 1 - Immediate actions", "duration": "1-3 months",
             "actions": ["Audit current processes and identify bottlenecks"]},
            {"phase": "Phase 2 - Development", "duration": "3-6 months",
             "actions": [f"Open 2 new points of sale in high-potential areas of {ctx.country}"]},
            {"phase": "Phase 3 - Expansion", "duration": "6-12 months",
             "actions": ["Form a strategic partnership with a sector leader"]},
        ],
    }
    return f"""
You are a business strategy expert specialised in African markets. Produce a
detailed, personalised action plan with CONCRETE and SPECIFIC actions.

{JSON_ONLY_RULES}
- IMPORTANT: no generic placeholders such as "Priority action 1"
- Every action must be detailed and actionable
- Adapt the actions to the health score, the sector and {ctx.country}

COMPANY:
- Name: {ctx.company_name}
- Country: {ctx.country}
- Currency: {ctx.currency}
- Website: {ctx.website or "Not provided"}
- Size: {ctx.company_size or "Not provided"}
- Sector: {company.sector}
- Revenue: {_amount(company.revenue)} {ctx.currency}
- Expenses: {_amount(company.expenses)} {ctx.currency}
- Employees: {company.employees}
- Health score: {analysis.health_score.overall:g}/100
- Competitive position: {analysis.competitive_position.position}

SECTOR DATA ({ctx.country}):
- Average sector revenue: {_amount(sector.average_revenue)} {ctx.currency}
- Sector growth: {sector.growth_rate:g}%
- Market size: {_amount(sector.market_size)} {ctx.currency}

STRENGTHS AND WEAKNESSES:
- Strengths: {_joined(analysis.health_score.details.strengths)}
- Weaknesses: {_joined(analysis.health_score.details.weaknesses)}

EXISTING RECOMMENDATIONS:
- Immediate: {_joined(analysis.recommendations.immediate)}
- Short term: {_joined(analysis.recommendations.short_term)}
- Long term: {_joined(analysis.recommendations.long_term)}

Expected answer:
{json.dumps(example, indent=2, ensure_ascii=False)}

REQUIRED ANSWER: JSON only, no extra formatting.
"""


def business_plan_prompt(request: BusinessPlanRequest, generated_at: str) -> str:
    example = {
        to_camel(name): {
            "title": title,
            "content": f"{title} content...",
            "subsections": [{"title": "Key points", "content": "Details..."}],
        }
        for name, title in SECTION_TITLES.items()
        if name != "appendices"
    }
    example["metadata"] = {
        "generatedAt": generated_at,
        "companyName": request.company_name,
        "industry": request.industry,
        "totalPages": 25,
    }
    sections = ", ".join(to_camel(name) for name in request.sections.enabled())
    return f"""
You are an expert in business plans for African markets. Produce a complete,
professional business plan.

{JSON_ONLY_RULES}
- Every value must be a plain string
- Structure the content professionally and engagingly

COMPANY:
- Name: {request.company_name}
- Industry: {request.industry}
- Description: {request.description}
- Market size: {request.market_size} FCFA
- Target market: {request.target_market}
- Competitive advantage: {request.competitive_advantage}
- Revenue model: {request.revenue_model}
- Funding required: {request.funding_required} FCFA
- Team size: {request.team_size}
- Time horizon: {request.timeline}

SECTIONS TO GENERATE: {sections}

Expected answer:
{json.dumps(example, indent=2, ensure_ascii=False)}

RULES:
- Adapt the content to West African markets and use FCFA amounts
- Include realistic local market data, measurable metrics and KPIs
- Give every section relevant subsections

REQUIRED ANSWER: JSON only, no extra formatting.
"""

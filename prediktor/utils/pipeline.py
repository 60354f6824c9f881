"""
Pipeline runners: generate a record, persist it to the user's history, hand
it back to the caller. Shared by the API routes, the dashboard and the CLI.

  run_sector_analysis  → AnalysisService (Live | Demo)   → analyses
  run_insights         → build_insights                  → predictions
  run_business_plan    → BusinessPlanService             → businessPlans

Persistence is best effort: a failed history write is logged by the storage
layer and the freshly generated record is still returned.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Tuple

from pydantic import ValidationError
from sqlalchemy.orm import Session

from prediktor.agents.analyst import AnalysisService
from prediktor.agents.base import AnalysisOutcome, outcome_document
from prediktor.agents.business_plan import BusinessPlanService
from prediktor.agents.insights import build_insights
from prediktor.db.auth import SessionContext
from prediktor.db import storage
from prediktor.models.schemas import (
    BusinessPlanRequest,
    CompanyData,
    ComparativeAnalysis,
    GeneratedBusinessPlan,
    InsightData,
    UserProfile,
)

logger = logging.getLogger(__name__)


def run_sector_analysis(
    db: Session,
    session: SessionContext,
    company: CompanyData,
    profile: Optional[UserProfile] = None,
    service: Optional[AnalysisService] = None,
) -> Tuple[AnalysisOutcome, Optional[int]]:
    """Comparative analysis for `company`, saved to the user's analyses."""
    service = service or AnalysisService()
    outcome = service.generate_comparative_analysis(company, profile)
    if outcome.is_demo_data:
        logger.warning(f"Serving demo analysis to user {session.user_id}")
    record_id = storage.save_analysis(db, session.user_id, outcome_document(outcome))
    return outcome, record_id


def load_last_analysis(db: Session, user_id: str) -> Optional[Tuple[ComparativeAnalysis, bool]]:
    """Most recent stored analysis and its demo flag, if it still validates."""
    history = storage.get_user_history(db, user_id)
    document = history["lastAnalysis"]
    if document is None:
        return None
    try:
        analysis = ComparativeAnalysis.model_validate(document)
    except ValidationError as e:
        logger.error(f"Stored analysis {document.get('id')} is unreadable: {e}")
        return None
    return analysis, bool(document.get("isDemoData", False))


def run_insights(
    db: Session,
    session: SessionContext,
    analysis: ComparativeAnalysis,
    is_demo_data: bool = False,
    company_name: Optional[str] = None,
) -> Tuple[InsightData, Optional[int]]:
    insights = build_insights(analysis, is_demo_data=is_demo_data, company_name=company_name)
    record_id = storage.save_prediction(db, session.user_id, insights)
    return insights, record_id


def run_business_plan(
    db: Session,
    session: SessionContext,
    request: BusinessPlanRequest,
    service: Optional[BusinessPlanService] = None,
) -> Tuple[GeneratedBusinessPlan, Optional[int]]:
    """Raises GeminiError subclasses; nothing is saved in that case."""
    service = service or BusinessPlanService()
    plan = service.generate_business_plan(request)
    record_id = storage.save_business_plan(db, session.user_id, plan)
    return plan, record_id


def summarize_outcome(outcome: AnalysisOutcome) -> Dict[str, Any]:
    """Headline numbers for logs and the CLI demo."""
    analysis = outcome.analysis
    return {
        "sector": analysis.company_data.sector,
        "is_demo_data": outcome.is_demo_data,
        "health_score": analysis.health_score.overall,
        "position": analysis.competitive_position.position,
        "growth_rate": analysis.sector_data.growth_rate,
    }

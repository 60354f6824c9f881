"""
FastAPI Route Handlers
Prediktor
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List

from fastapi import APIRouter, HTTPException, Depends, Request
from fastapi.responses import Response
from sqlalchemy.orm import Session

from prediktor.agents.analyst import AnalysisService
from prediktor.agents.business_plan import BusinessPlanService
from prediktor.agents.errors import GeminiError, QuotaExceededError
from prediktor.api.deps import (
    SESSION_KEY,
    get_analysis_service,
    get_business_plan_service,
    get_db,
    get_profile_service,
    get_session_context,
)
from prediktor.api.schemas import (
    ActionPlanRequest,
    AnalysisResponse,
    BusinessPlanResponse,
    CredentialsRequest,
    ExportAnalysisRequest,
    HealthResponse,
    HistoryResponse,
    InsightsRequest,
    InsightsResponse,
    MessageResponse,
    ProfileCompletionResponse,
    ProfileStatsResponse,
    SessionResponse,
)
from prediktor.config.settings import settings
from prediktor.db import storage
from prediktor.db.auth import AuthError, AuthService, SessionContext
from prediktor.db.profiles import (
    ProfileNotFoundError,
    UserProfileService,
    is_profile_complete,
    missing_profile_fields,
    profile_completion_percentage,
)
from prediktor.models.schemas import (
    ActionPlan,
    BusinessPlanRequest,
    CompanyData,
    GeneratedBusinessPlan,
    UserProfile,
    UserProfileUpdate,
)
from prediktor.utils.pdf_export import PDFExportService, build_export_filename
from prediktor.utils.pipeline import (
    load_last_analysis,
    run_business_plan,
    run_insights,
    run_sector_analysis,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def gemini_http_error(error: GeminiError) -> HTTPException:
    """429 for quota exhaustion, 502 for every other upstream failure."""
    if isinstance(error, QuotaExceededError):
        return HTTPException(status_code=429, detail=str(error))
    return HTTPException(status_code=502, detail=f"Analysis service unavailable: {error}")


def pdf_response(content: bytes, filename: str) -> Response:
    return Response(
        content=content,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


# ─── Health ──────────────────────────────────────────────────────────────────

@router.get("/health", response_model=HealthResponse, tags=["System"])
def health_check():
    return HealthResponse(
        status="ok",
        version=settings.APP_VERSION,
        timestamp=datetime.now(timezone.utc),
    )


# ─── Auth ────────────────────────────────────────────────────────────────────

@router.post("/auth/register", response_model=SessionResponse, status_code=201, tags=["Auth"])
def register(body: CredentialsRequest, request: Request, db: Session = Depends(get_db)):
    try:
        session = AuthService(db).register(body.email, body.password)
    except AuthError as e:
        raise HTTPException(status_code=400, detail=str(e))
    request.session[SESSION_KEY] = session.to_dict()
    return SessionResponse(user_id=session.user_id, email=session.email)


@router.post("/auth/login", response_model=SessionResponse, tags=["Auth"])
def login(body: CredentialsRequest, request: Request, db: Session = Depends(get_db)):
    try:
        session = AuthService(db).login(body.email, body.password)
    except AuthError as e:
        raise HTTPException(status_code=401, detail=str(e))
    request.session[SESSION_KEY] = session.to_dict()
    return SessionResponse(user_id=session.user_id, email=session.email)


@router.post("/auth/logout", response_model=MessageResponse, tags=["Auth"])
def logout(request: Request):
    request.session.pop(SESSION_KEY, None)
    return MessageResponse(status="ok", message="Logged out")


@router.get("/auth/me", response_model=SessionResponse, tags=["Auth"])
def me(session: SessionContext = Depends(get_session_context)):
    return SessionResponse(user_id=session.user_id, email=session.email)


# ─── Analysis ────────────────────────────────────────────────────────────────

@router.post("/analysis", response_model=AnalysisResponse, tags=["Analysis"])
def create_analysis(
    company: CompanyData,
    session: SessionContext = Depends(get_session_context),
    db: Session = Depends(get_db),
    profiles: UserProfileService = Depends(get_profile_service),
    service: AnalysisService = Depends(get_analysis_service),
):
    """
    Sector data → health score → positioning.
    Never fails on upstream errors: demo data is returned instead, flagged.
    """
    profile = profiles.load_user_profile(session.user_id)
    outcome, record_id = run_sector_analysis(db, session, company, profile, service)
    return AnalysisResponse(
        id=record_id,
        is_demo_data=outcome.is_demo_data,
        error=getattr(outcome, "error", None),
        analysis=outcome.analysis,
    )


@router.get("/analysis/history", response_model=List[Dict[str, Any]], tags=["Analysis"])
def analysis_history(
    session: SessionContext = Depends(get_session_context),
    db: Session = Depends(get_db),
):
    return storage.get_user_analyses(db, session.user_id)


@router.post("/analysis/action-plan", response_model=ActionPlan, tags=["Analysis"])
def create_action_plan(
    body: ActionPlanRequest,
    session: SessionContext = Depends(get_session_context),
    profiles: UserProfileService = Depends(get_profile_service),
    service: AnalysisService = Depends(get_analysis_service),
):
    profile = profiles.load_user_profile(session.user_id)
    try:
        return service.generate_action_plan(body.analysis, profile)
    except GeminiError as e:
        logger.error(f"Action plan generation failed: {e}")
        raise gemini_http_error(e)


# ─── Insights & Predictions ──────────────────────────────────────────────────

@router.post("/insights", response_model=InsightsResponse, tags=["Insights"])
def create_insights(
    body: InsightsRequest,
    session: SessionContext = Depends(get_session_context),
    db: Session = Depends(get_db),
    profiles: UserProfileService = Depends(get_profile_service),
):
    analysis, is_demo_data = body.analysis, body.is_demo_data
    if analysis is None:
        last = load_last_analysis(db, session.user_id)
        if last is None:
            raise HTTPException(
                status_code=404,
                detail="No recent analysis found. Please run a sector analysis first.",
            )
        analysis, is_demo_data = last

    company_name = body.company_name
    if not company_name:
        profile = profiles.load_user_profile(session.user_id)
        company_name = profile.company_name if profile else None

    insights, record_id = run_insights(db, session, analysis, is_demo_data, company_name)
    return InsightsResponse(id=record_id, insights=insights)


@router.get("/predictions", response_model=List[Dict[str, Any]], tags=["Insights"])
def predictions(
    session: SessionContext = Depends(get_session_context),
    db: Session = Depends(get_db),
):
    return storage.get_user_predictions(db, session.user_id)


@router.get("/history", response_model=HistoryResponse, tags=["Insights"])
def history(
    session: SessionContext = Depends(get_session_context),
    db: Session = Depends(get_db),
):
    latest = storage.get_user_history(db, session.user_id)
    return HistoryResponse(
        last_analysis=latest["lastAnalysis"],
        last_prediction=latest["lastPrediction"],
    )


# ─── Business Plans ──────────────────────────────────────────────────────────

@router.post("/business-plans", response_model=BusinessPlanResponse, tags=["Business Plans"])
def create_business_plan(
    body: BusinessPlanRequest,
    session: SessionContext = Depends(get_session_context),
    db: Session = Depends(get_db),
    service: BusinessPlanService = Depends(get_business_plan_service),
):
    try:
        plan, record_id = run_business_plan(db, session, body, service)
    except GeminiError as e:
        logger.error(f"Business plan generation failed: {e}")
        raise gemini_http_error(e)
    return BusinessPlanResponse(id=record_id, plan=plan)


@router.get("/business-plans", response_model=List[Dict[str, Any]], tags=["Business Plans"])
def business_plans(
    session: SessionContext = Depends(get_session_context),
    db: Session = Depends(get_db),
):
    return storage.get_user_business_plans(db, session.user_id)


# ─── Export ──────────────────────────────────────────────────────────────────

@router.post("/export/business-plan", tags=["Export"])
def export_business_plan(
    plan: GeneratedBusinessPlan,
    session: SessionContext = Depends(get_session_context),
):
    content = PDFExportService().export_business_plan(plan)
    return pdf_response(content, build_export_filename("Business_Plan", plan.metadata.company_name))


@router.post("/export/analysis", tags=["Export"])
def export_analysis(
    body: ExportAnalysisRequest,
    session: SessionContext = Depends(get_session_context),
):
    name = body.company_name or body.analysis.company_data.sector
    content = PDFExportService().export_analysis(body.analysis, company_name=name)
    return pdf_response(content, build_export_filename("Sector_Analysis", name))


# ─── Profile ─────────────────────────────────────────────────────────────────

def _load_profile(profiles: UserProfileService, session: SessionContext) -> UserProfile:
    profile = profiles.load_user_profile(session.user_id)
    if profile is None:
        raise HTTPException(status_code=404, detail="Profile not found")
    return profile


@router.get("/profile", response_model=UserProfile, tags=["Profile"])
def get_profile(
    session: SessionContext = Depends(get_session_context),
    profiles: UserProfileService = Depends(get_profile_service),
):
    return _load_profile(profiles, session)


@router.put("/profile", response_model=UserProfile, tags=["Profile"])
def update_profile(
    changes: UserProfileUpdate,
    session: SessionContext = Depends(get_session_context),
    profiles: UserProfileService = Depends(get_profile_service),
):
    try:
        return profiles.update_user_profile(session.user_id, changes)
    except ProfileNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get("/profile/completion", response_model=ProfileCompletionResponse, tags=["Profile"])
def profile_completion(
    session: SessionContext = Depends(get_session_context),
    profiles: UserProfileService = Depends(get_profile_service),
):
    profile = _load_profile(profiles, session)
    return ProfileCompletionResponse(
        percentage=profile_completion_percentage(profile),
        is_complete=is_profile_complete(profile),
        missing_fields=missing_profile_fields(profile),
    )


@router.get("/profile/stats", response_model=ProfileStatsResponse, tags=["Profile"])
def profile_stats(
    session: SessionContext = Depends(get_session_context),
    profiles: UserProfileService = Depends(get_profile_service),
):
    return profiles.get_profile_stats()

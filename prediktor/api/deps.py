"""FastAPI dependencies: database session, services, authenticated user."""

import logging
from typing import Generator

import requests
from fastapi import Depends, HTTPException, Request
from sqlalchemy.orm import Session

from prediktor.agents.analyst import AnalysisService
from prediktor.agents.business_plan import BusinessPlanService
from prediktor.agents.gemini import GeminiClient
from prediktor.db.auth import SessionContext
from prediktor.db.database import get_db_dependency
from prediktor.db.profiles import UserProfileService

logger = logging.getLogger(__name__)

SESSION_KEY = "auth"


def get_db() -> Generator[Session, None, None]:
    yield from get_db_dependency()


def get_gemini_client() -> Generator[GeminiClient, None, None]:
    """One HTTP session per request, closed once the response is sent."""
    with requests.Session() as session:
        yield GeminiClient(session=session)


def get_analysis_service(client: GeminiClient = Depends(get_gemini_client)) -> AnalysisService:
    return AnalysisService(client)


def get_business_plan_service(client: GeminiClient = Depends(get_gemini_client)) -> BusinessPlanService:
    return BusinessPlanService(client)


def get_profile_service(db: Session = Depends(get_db)) -> UserProfileService:
    return UserProfileService(db)


def get_session_context(request: Request) -> SessionContext:
    """Authenticated user from the signed session cookie, or 401."""
    session = SessionContext.from_dict(request.session.get(SESSION_KEY))
    if session is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return session

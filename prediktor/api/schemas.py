"""
Pydantic schemas for API request/response validation.

Domain records (analyses, plans, profiles) are served in their camelCase
stored form; the envelopes below use the same convention.
"""

from pydantic import BaseModel, Field
from typing import List, Optional, Dict, Any
from datetime import datetime

from prediktor.models.schemas import (
    CamelModel,
    ComparativeAnalysis,
    GeneratedBusinessPlan,
    InsightData,
)


# ─── Request Schemas ─────────────────────────────────────────────────────────

class CredentialsRequest(BaseModel):
    email: str
    password: str = Field(..., min_length=1)


class ActionPlanRequest(CamelModel):
    analysis: ComparativeAnalysis


class InsightsRequest(CamelModel):
    """Without `analysis`, insights are built from the user's latest stored analysis."""
    analysis: Optional[ComparativeAnalysis] = None
    is_demo_data: bool = False
    company_name: Optional[str] = None


class ExportAnalysisRequest(CamelModel):
    analysis: ComparativeAnalysis
    company_name: Optional[str] = None


# ─── Response Schemas ────────────────────────────────────────────────────────

class HealthResponse(BaseModel):
    status: str
    version: str
    timestamp: datetime


class SessionResponse(CamelModel):
    user_id: str
    email: str


class MessageResponse(BaseModel):
    status: str
    message: str


class AnalysisResponse(CamelModel):
    id: Optional[int] = None
    is_demo_data: bool
    error: Optional[str] = None
    analysis: ComparativeAnalysis


class InsightsResponse(CamelModel):
    id: Optional[int] = None
    insights: InsightData


class BusinessPlanResponse(CamelModel):
    id: Optional[int] = None
    plan: GeneratedBusinessPlan


class HistoryResponse(CamelModel):
    last_analysis: Optional[Dict[str, Any]] = None
    last_prediction: Optional[Dict[str, Any]] = None


class ProfileCompletionResponse(CamelModel):
    percentage: int
    is_complete: bool
    missing_fields: List[str]


class IndustryCount(CamelModel):
    industry: str
    count: int


class ProfileStatsResponse(CamelModel):
    total_users: int
    complete_profiles: int
    incomplete_profiles: int
    top_industries: List[IndustryCount]

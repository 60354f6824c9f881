"""
Core data models for Prediktor.
"""

from .schemas import (
    CompanyData,
    SectorData,
    HealthScore,
    AnalysisDelta,
    ComparativeAnalysis,
    ActionPlan,
    BusinessPlanRequest,
    BusinessPlanSection,
    GeneratedBusinessPlan,
    InsightData,
    UserProfile,
    UserProfileUpdate,
)

__all__ = [
    "CompanyData",
    "SectorData",
    "HealthScore",
    "AnalysisDelta",
    "ComparativeAnalysis",
    "ActionPlan",
    "BusinessPlanRequest",
    "BusinessPlanSection",
    "GeneratedBusinessPlan",
    "InsightData",
    "UserProfile",
    "UserProfileUpdate",
]

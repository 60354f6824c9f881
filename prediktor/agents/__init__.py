from .base import Agent, AgentResult, Orchestrator, Live, Demo, AnalysisOutcome
from .errors import (
    GeminiError, GeminiHTTPError, GeminiTransportError,
    InvalidResponseError, MissingAPIKeyError, QuotaExceededError,
)
from .gemini import GeminiClient
from .analyst import AnalysisService
from .business_plan import BusinessPlanService
from .insights import build_insights

__all__ = [
    "Agent", "AgentResult", "Orchestrator", "Live", "Demo", "AnalysisOutcome",
    "GeminiError", "GeminiHTTPError", "GeminiTransportError",
    "InvalidResponseError", "MissingAPIKeyError", "QuotaExceededError",
    "GeminiClient", "AnalysisService", "BusinessPlanService", "build_insights",
]

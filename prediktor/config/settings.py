"""
Configuration & Settings
Prediktor: Sector Analysis & Business Planning
"""

from pydantic import BaseModel
from typing import Optional
import os


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    return int(value) if value else default


def _env_float(name: str, default: Optional[float] = None) -> Optional[float]:
    value = os.getenv(name)
    return float(value) if value else default


class Settings(BaseModel):
    # App
    APP_NAME: str = os.getenv("APP_NAME", "Prediktor")
    APP_VERSION: str = os.getenv("APP_VERSION", "1.0.0")
    DEBUG: bool = _env_bool("DEBUG")

    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./prediktor.db")

    # Sessions
    SECRET_KEY: str = os.getenv("SECRET_KEY", "prediktor-dev-secret-change-me")

    # Gemini
    GEMINI_API_KEY: Optional[str] = os.getenv("GEMINI_API_KEY")
    GEMINI_MODEL: str = os.getenv("GEMINI_MODEL", "gemini-2.5-pro")
    GEMINI_BASE_URL: str = os.getenv(
        "GEMINI_BASE_URL", "https://generativelanguage.googleapis.com/v1beta"
    )
    GEMINI_TEMPERATURE: float = _env_float("GEMINI_TEMPERATURE", 0.1)
    GEMINI_TOP_K: int = _env_int("GEMINI_TOP_K", 40)
    GEMINI_TOP_P: float = _env_float("GEMINI_TOP_P", 0.95)
    GEMINI_MAX_OUTPUT_TOKENS: int = _env_int("GEMINI_MAX_OUTPUT_TOKENS", 8192)
    # None means requests waits indefinitely; one attempt per call, no retry.
    REQUEST_TIMEOUT: Optional[float] = _env_float("REQUEST_TIMEOUT")

    # Prompt context used when the user profile leaves a field empty
    DEFAULT_COUNTRY: str = os.getenv("DEFAULT_COUNTRY", "Côte d'Ivoire")
    DEFAULT_CURRENCY: str = os.getenv("DEFAULT_CURRENCY", "FCFA")
    DEFAULT_COMPANY_NAME: str = os.getenv("DEFAULT_COMPANY_NAME", "Your company")

    # API / Dashboard
    API_HOST: str = os.getenv("API_HOST", "0.0.0.0")
    API_PORT: int = _env_int("API_PORT", 8000)
    DASHBOARD_PORT: int = _env_int("DASHBOARD_PORT", 8501)


settings = Settings()

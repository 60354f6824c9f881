"""
Gemini Client
-------------
Thin wrapper over the `generateContent` REST endpoint.

One POST per prompt, no retry and no backoff: callers decide what a failure
means. HTTP 429 is raised as QuotaExceededError so callers can tell quota
exhaustion apart from other HTTP errors.
"""

import logging
from typing import Any, Dict, Optional

import requests

from prediktor.agents.errors import (
    GeminiHTTPError,
    GeminiTransportError,
    InvalidResponseError,
    MissingAPIKeyError,
    QuotaExceededError,
)
from prediktor.config.settings import Settings, settings as default_settings

logger = logging.getLogger(__name__)


class GeminiClient:
    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        config: Optional[Settings] = None,
        session: Optional[requests.Session] = None,
    ):
        self.config = config or default_settings
        self.api_key = api_key if api_key is not None else self.config.GEMINI_API_KEY
        self.model = model or self.config.GEMINI_MODEL
        self.session = session or requests.Session()
        self.session.headers.update({"Content-Type": "application/json"})

    @property
    def endpoint(self) -> str:
        base = self.config.GEMINI_BASE_URL.rstrip("/")
        return f"{base}/models/{self.model}:generateContent"

    def build_payload(self, prompt: str) -> Dict[str, Any]:
        return {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": self.config.GEMINI_TEMPERATURE,
                "topK": self.config.GEMINI_TOP_K,
                "topP": self.config.GEMINI_TOP_P,
                "maxOutputTokens": self.config.GEMINI_MAX_OUTPUT_TOKENS,
            },
        }

    def generate_content(self, prompt: str) -> str:
        """Send one prompt and return the text of the first candidate."""
        if not self.api_key:
            raise MissingAPIKeyError()

        try:
            resp = self.session.post(
                self.endpoint,
                params={"key": self.api_key},
                json=self.build_payload(prompt),
                timeout=self.config.REQUEST_TIMEOUT,
            )
        except requests.RequestException as e:
            logger.error(f"Gemini request failed: {e}")
            raise GeminiTransportError(f"Gemini request failed: {e}") from e

        if resp.status_code == 429:
            logger.warning("Gemini quota exceeded (HTTP 429)")
            raise QuotaExceededError()
        if not resp.ok:
            logger.error(f"Gemini returned HTTP {resp.status_code}")
            raise GeminiHTTPError(resp.status_code)

        try:
            envelope = resp.json()
            return envelope["candidates"][0]["content"]["parts"][0]["text"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise InvalidResponseError(
                f"Unexpected Gemini response envelope: {e}", raw_text=resp.text
            ) from e

"""
Error taxonomy for calls to the generative API.
"""

from typing import Optional


class GeminiError(Exception):
    """Base class for every failure on the way to a parsed model response."""


class MissingAPIKeyError(GeminiError):
    def __init__(self):
        super().__init__("GEMINI_API_KEY is not set")


class GeminiTransportError(GeminiError):
    """The request never produced an HTTP response."""


class GeminiHTTPError(GeminiError):
    def __init__(self, status_code: int, message: Optional[str] = None):
        self.status_code = status_code
        super().__init__(message or f"Gemini API returned HTTP {status_code}")


class QuotaExceededError(GeminiHTTPError):
    def __init__(self):
        super().__init__(
            429,
            "Gemini API quota exceeded or rate limited. Please try again in a few minutes.",
        )


class InvalidResponseError(GeminiError):
    """The model answered, but not with parseable JSON."""

    def __init__(self, message: str, raw_text: str = ""):
        self.raw_text = raw_text
        super().__init__(message)

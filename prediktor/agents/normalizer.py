"""
Response Normalizer
-------------------
Turns the free text a generative model returns into a validated record.

  raw text
    -> trim, strip ``` fences
    -> slice first "{" .. last "}"
    -> json.loads, strict          (InvalidResponseError on failure, NaN/Infinity included)
    -> lenient pydantic model      (defaults for anything missing/mistyped)

A JSON root that is not an object validates as an empty object, i.e. a
record made entirely of defaults.
"""

import json
import logging
import re
from typing import Any, Dict, Optional, Type, TypeVar

from pydantic import BaseModel

from prediktor.agents.errors import InvalidResponseError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

_LEADING_FENCE = re.compile(r"^```(?:json)?\s*", re.IGNORECASE)
_TRAILING_FENCE = re.compile(r"\s*```$")


def clean_json_response(text: str) -> str:
    """Strip markdown fences and any prose around the outermost JSON object."""
    cleaned = text.strip()
    cleaned = _LEADING_FENCE.sub("", cleaned)
    cleaned = _TRAILING_FENCE.sub("", cleaned)

    for opening, closing in (("{", "}"), ("[", "]")):
        start = cleaned.find(opening)
        end = cleaned.rfind(closing)
        if start != -1 and end > start:
            return cleaned[start:end + 1].strip()

    return cleaned.strip()


def _reject_constant(name: str) -> Any:
    raise ValueError(f"Non-finite number {name} is not valid JSON")


def parse_json_response(text: str) -> Any:
    """Clean and decode a model response. Raises InvalidResponseError."""
    cleaned = clean_json_response(text or "")
    if not cleaned:
        raise InvalidResponseError("Empty response from Gemini API", raw_text=text or "")
    try:
        return json.loads(cleaned, parse_constant=_reject_constant)
    except ValueError as e:
        logger.error(f"JSON parse error: {e}\nRaw response: {text!r}")
        raise InvalidResponseError(
            f"Invalid JSON response from Gemini API: {e}", raw_text=text
        ) from e


def normalize(
    data: Any,
    model: Type[ModelT],
    context: Optional[Dict[str, Any]] = None,
) -> ModelT:
    """Validate already-decoded JSON against a lenient model."""
    if not isinstance(data, dict):
        data = {}
    return model.model_validate(data, context=context)


def parse_model(
    text: str,
    model: Type[ModelT],
    context: Optional[Dict[str, Any]] = None,
) -> ModelT:
    return normalize(parse_json_response(text), model, context=context)

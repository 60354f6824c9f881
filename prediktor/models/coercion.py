"""
Field coercion for model-generated payloads.

Generative responses are only loosely shaped like the JSON we ask for. Every
field goes through one of the coercers below before pydantic validates it:
a value of the right primitive shape passes through, anything else is
replaced by the field's declared default.

The `*_fields` helpers turn a coercer into a reusable `before` validator that
looks the default up on the model itself, so each default is declared exactly
once, on the field.
"""

from __future__ import annotations

import copy
import json
import math
from typing import Any, Iterable, List

from pydantic import BaseModel, ValidationInfo, field_validator


# ─── Primitive Coercers ──────────────────────────────────────────────────────


def is_number(value: Any) -> bool:
    """True for finite int/float values. Booleans are not numbers here."""
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return isinstance(value, float) and math.isfinite(value)


def coerce_number(value: Any, default: float) -> float:
    return value if is_number(value) else default


def coerce_string(value: Any, default: str) -> str:
    return value if isinstance(value, str) else default


def _integral_floats_as_int(item: Any) -> Any:
    if isinstance(item, float) and item.is_integer():
        return int(item)
    if isinstance(item, dict):
        return {key: _integral_floats_as_int(value) for key, value in item.items()}
    if isinstance(item, list):
        return [_integral_floats_as_int(value) for value in item]
    return item


def stringify(item: Any) -> str:
    """Strings pass through; anything else is compact JSON (3.0 -> "3")."""
    if isinstance(item, str):
        return item
    return json.dumps(_integral_floats_as_int(item), ensure_ascii=False, separators=(",", ":"))


def coerce_string_list(value: Any, default: List[str]) -> List[str]:
    """Keep list length: wrong-typed elements are stringified, not dropped."""
    if not isinstance(value, list):
        return list(default)
    return [stringify(item) for item in value]


def coerce_object(value: Any, default: Any = None) -> Any:
    """Nested records: a dict or model is validated further, anything else starts empty."""
    if isinstance(value, (dict, BaseModel)):
        return value
    return default if default is not None else {}


def coerce_object_list(value: Any, default: List[Any], non_empty: bool = False) -> List[Any]:
    """Non-record elements become empty records so the list keeps its length."""
    if not isinstance(value, list) or (non_empty and not value):
        return copy.deepcopy(default)
    return [item if isinstance(item, (dict, BaseModel)) else {} for item in value]


def coerce_choice(value: Any, choices: Iterable[str], default: str) -> str:
    return value if isinstance(value, str) and value in set(choices) else default


# ─── Reusable Validators ─────────────────────────────────────────────────────


def field_default(cls, info: ValidationInfo) -> Any:
    return cls.model_fields[info.field_name].get_default(call_default_factory=True)


def number_fields(*names: str):
    def _coerce(cls, value: Any, info: ValidationInfo) -> Any:
        return coerce_number(value, field_default(cls, info))
    return field_validator(*names, mode="before")(_coerce)


def string_fields(*names: str):
    def _coerce(cls, value: Any, info: ValidationInfo) -> Any:
        return coerce_string(value, field_default(cls, info))
    return field_validator(*names, mode="before")(_coerce)


def string_list_fields(*names: str):
    def _coerce(cls, value: Any, info: ValidationInfo) -> Any:
        return coerce_string_list(value, field_default(cls, info))
    return field_validator(*names, mode="before")(_coerce)


def object_fields(*names: str):
    def _coerce(cls, value: Any, info: ValidationInfo) -> Any:
        return coerce_object(value)
    return field_validator(*names, mode="before")(_coerce)


def object_list_fields(*names: str, non_empty: bool = False):
    def _coerce(cls, value: Any, info: ValidationInfo) -> Any:
        return coerce_object_list(value, field_default(cls, info), non_empty=non_empty)
    return field_validator(*names, mode="before")(_coerce)


def choice_fields(*names: str, choices: Iterable[str]):
    allowed = tuple(choices)

    def _coerce(cls, value: Any, info: ValidationInfo) -> Any:
        return coerce_choice(value, allowed, field_default(cls, info))
    return field_validator(*names, mode="before")(_coerce)


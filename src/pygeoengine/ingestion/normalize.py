"""Normalization helpers.

Centralizes defensive parsing of loosely typed server payloads.
"""

from __future__ import annotations

import math
from typing import Any


def safe_float(value: Any) -> float | None:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(result) or math.isinf(result):
        return None
    return result


def safe_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text if text else None


def drop_empty(values: dict[str, Any]) -> dict[str, Any]:
    """Return *values* without ``None`` and blank-string entries.

    Used by model validators so that a null from the server falls back to
    the field default instead of failing validation.
    """
    return {
        key: value
        for key, value in values.items()
        if value is not None and not (isinstance(value, str) and not value.strip())
    }

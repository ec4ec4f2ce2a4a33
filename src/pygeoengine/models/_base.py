"""Base model and shared field types for geo backend payloads.

Every payload model inherits from :class:`GeoBaseModel` which provides:

* frozen, extra-tolerant configuration (the backend adds fields freely);
* a ``model_validator(mode="before")`` that drops ``None`` and blank
  strings so the field default is used instead of failing validation.
"""

from __future__ import annotations

from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, model_validator

from pygeoengine.ingestion.normalize import drop_empty, safe_float, safe_str


def _heading_or_zero(value: Any) -> float:
    parsed = safe_float(value)
    return 0.0 if parsed is None else parsed


RecordId = Annotated[str, BeforeValidator(safe_str)]
"""Server record id; UUIDs and integers are both carried as text."""

DeviceId = Annotated[str, BeforeValidator(safe_str), Field(min_length=1)]
"""Device identifier; numbers are coerced to text and surrounding blanks stripped."""

Latitude = Annotated[float, Field(ge=-90.0, le=90.0)]
Longitude = Annotated[float, Field(ge=-180.0, le=180.0)]

Heading = Annotated[float, BeforeValidator(_heading_or_zero)]
"""Heading in degrees; unparseable values fall back to ``0.0`` (north)."""


class GeoBaseModel(BaseModel):
    """Base for geo backend payload models."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
    )

    @model_validator(mode="before")
    @classmethod
    def _drop_empty_values(cls, values: Any) -> Any:
        if not isinstance(values, dict):
            return values
        return drop_empty(values)

from __future__ import annotations

import math

import pytest

from pygeoengine.ingestion.normalize import drop_empty, safe_float, safe_str
from pygeoengine.models.geofence import GeofenceRecord


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (1, 1.0),
        ("2.5", 2.5),
        (None, None),
        ("", None),
        ("abc", None),
        (True, None),
        (math.nan, None),
        (math.inf, None),
    ],
)
def test_safe_float(value: object, expected: float | None) -> None:
    assert safe_float(value) == expected


def test_safe_str() -> None:
    assert safe_str("  truck-1 ") == "truck-1"
    assert safe_str("   ") is None
    assert safe_str(None) is None
    assert safe_str(42) == "42"


def test_drop_empty() -> None:
    assert drop_empty({"a": 1, "b": None, "c": " ", "d": "x"}) == {"a": 1, "d": "x"}


def test_geofence_record_serialises_object_geometry() -> None:
    record = GeofenceRecord.model_validate({"id": "z1", "geojson": {"type": "Polygon", "coordinates": []}})

    assert record.name == ""
    assert record.geojson.startswith("{")
    assert '"Polygon"' in record.geojson

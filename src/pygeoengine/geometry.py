"""Coordinate order conversions and polygon ring helpers.

Storage and the interchange format (GeoJSON) use (longitude, latitude);
the console and every in-memory store use (latitude, longitude).  All
conversions between the two happen here.
"""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from pygeoengine._constants import MIN_POLYGON_VERTICES
from pygeoengine.exceptions import GeoDecodeError, GeoValidationError

LatLng = tuple[float, float]
"""A point in display order: ``(latitude, longitude)``."""

LonLat = tuple[float, float]
"""A point in storage order: ``(longitude, latitude)``."""

#: A persisted ring holds at least three distinct vertices plus the closing point.
MIN_RING_POINTS = MIN_POLYGON_VERTICES + 1

_Position = list[float]


class _PolygonGeometry(BaseModel):
    """Minimal Pydantic envelope for a GeoJSON ``Polygon``."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    type: Literal["Polygon"]
    coordinates: list[list[_Position]] = Field(..., min_length=1)


class _LineGeometry(BaseModel):
    """Route payload: a bare ``coordinates`` list, optionally typed ``LineString``."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    type: Literal["LineString"] | None = None
    coordinates: list[_Position] | None = None


def to_lat_lng(position: Sequence[float]) -> LatLng:
    """Swap a storage-order ``(lon, lat[, alt])`` position into ``(lat, lng)``."""
    if len(position) < 2:
        raise GeoDecodeError(f"position needs at least 2 values, got {list(position)!r}")
    return (float(position[1]), float(position[0]))


def to_lon_lat(point: Sequence[float]) -> LonLat:
    """Swap a display-order ``(lat, lng)`` point into ``(lon, lat)``."""
    return (float(point[1]), float(point[0]))


def is_closed(ring: Sequence[Sequence[float]]) -> bool:
    """Return ``True`` when the last point of *ring* equals its first."""
    return len(ring) > 1 and tuple(ring[0]) == tuple(ring[-1])


def close_ring(points: Sequence[Sequence[float]]) -> list[tuple[float, float]]:
    """Return *points* as a closed ring, appending the first point if needed."""
    ring = [(float(p[0]), float(p[1])) for p in points]
    if ring and not is_closed(ring):
        ring.append(ring[0])
    return ring


def open_ring(ring: Sequence[Sequence[float]]) -> list[tuple[float, float]]:
    """Return the free vertices of *ring* with the closing duplicate stripped."""
    points = [(float(p[0]), float(p[1])) for p in ring]
    if is_closed(points):
        points.pop()
    return points


def require_vertices(vertices: Sequence[Any], minimum: int = MIN_POLYGON_VERTICES) -> None:
    """Raise :class:`GeoValidationError` unless *vertices* has at least *minimum* entries."""
    if len(vertices) < minimum:
        raise GeoValidationError(f"at least {minimum} points required")


def polygon_geojson(vertices: Sequence[LatLng]) -> str:
    """Serialize display-order *vertices* as a GeoJSON ``Polygon`` string.

    *vertices* may or may not already repeat the first point; the output
    ring is always closed and in (lon, lat) order.
    """
    free = open_ring(vertices)
    require_vertices(free)
    ring = close_ring([to_lon_lat(p) for p in free])
    return json.dumps(
        {"type": "Polygon", "coordinates": [[list(p) for p in ring]]},
        separators=(",", ":"),
    )


def _load_geojson(source: str | bytes | Mapping[str, Any]) -> Any:
    if isinstance(source, Mapping):
        return source
    try:
        return json.loads(source)
    except (TypeError, ValueError) as exc:
        raise GeoDecodeError(f"geometry is not valid JSON: {exc}") from exc


def ring_from_geojson(source: str | bytes | Mapping[str, Any]) -> list[LatLng]:
    """Decode the outer ring of a GeoJSON ``Polygon`` into a closed display-order ring.

    Raises
    ------
    GeoDecodeError
        If *source* is not a polygon, or its first ring has fewer than
        three distinct vertices.
    """
    try:
        polygon = _PolygonGeometry.model_validate(_load_geojson(source))
    except ValidationError as exc:
        raise GeoDecodeError(f"geometry is not a GeoJSON polygon: {exc.error_count()} error(s)") from exc

    ring = close_ring([to_lat_lng(position) for position in polygon.coordinates[0]])
    if len(ring) < MIN_RING_POINTS:
        raise GeoDecodeError(f"polygon ring has {len(ring)} points, need at least {MIN_RING_POINTS}")
    return ring


def line_from_geojson(source: str | bytes | Mapping[str, Any]) -> list[LatLng]:
    """Decode a route's ``coordinates`` into display order.

    A missing or null ``coordinates`` list decodes to an empty route.
    """
    try:
        line = _LineGeometry.model_validate(_load_geojson(source))
    except ValidationError as exc:
        raise GeoDecodeError(f"route is not a coordinate list: {exc.error_count()} error(s)") from exc
    return [to_lat_lng(position) for position in line.coordinates or []]

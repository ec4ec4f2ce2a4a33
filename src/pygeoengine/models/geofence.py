"""Geofence models."""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

from pydantic import Field, field_validator

from pygeoengine.geometry import MIN_RING_POINTS, LatLng, is_closed, open_ring, ring_from_geojson
from pygeoengine.models._base import GeoBaseModel, RecordId


class GeofenceRecord(GeoBaseModel):
    """A zone row exactly as the backend lists it."""

    id: RecordId
    name: str = ""
    geojson: str

    @field_validator("geojson", mode="before")
    @classmethod
    def _serialize_object(cls, value: Any) -> Any:
        # Some backends embed the geometry as an object instead of a string.
        if isinstance(value, Mapping):
            return json.dumps(value, separators=(",", ":"))
        return value


class Geofence(GeoBaseModel):
    """A persisted zone with its outer ring in display order.

    Parameters
    ----------
    id : str
        Server-assigned zone id.
    name : str
        Operator-facing zone name.
    ring_lat_lng : tuple of (float, float)
        Closed ring in ``(latitude, longitude)`` order; the last point
        repeats the first.
    source_geojson : str
        The stored GeoJSON polygon, in ``(longitude, latitude)`` order.
    """

    id: RecordId
    name: str = ""
    ring_lat_lng: tuple[LatLng, ...] = Field(..., min_length=MIN_RING_POINTS)
    source_geojson: str

    @field_validator("ring_lat_lng")
    @classmethod
    def _require_closed(cls, value: tuple[LatLng, ...]) -> tuple[LatLng, ...]:
        if not is_closed(value):
            raise ValueError("ring must end with its first point")
        return value

    @property
    def vertices(self) -> tuple[LatLng, ...]:
        """The ring's free vertices, without the closing point."""
        return tuple(open_ring(self.ring_lat_lng))

    @classmethod
    def from_record(cls, record: GeofenceRecord) -> Geofence:
        """Decode a backend record.

        Raises
        ------
        GeoDecodeError
            If the stored geometry is not a usable polygon.
        """
        ring = ring_from_geojson(record.geojson)
        return cls(
            id=record.id,
            name=record.name,
            ring_lat_lng=tuple(ring),
            source_geojson=record.geojson,
        )

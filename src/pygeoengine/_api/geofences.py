"""Geofence endpoints.

Endpoints:
  - GET    /geofences
  - POST   /geofences
  - PUT    /geofences/{id}
  - DELETE /geofences/{id}
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

from pydantic import ValidationError

from pygeoengine._constants import GEOFENCE_ENDPOINT, GEOFENCES_ENDPOINT
from pygeoengine._transport import Transport
from pygeoengine.exceptions import GeoTransportError
from pygeoengine.models.geofence import GeofenceRecord

_logger = logging.getLogger(__name__)


def _geofence_endpoint(geofence_id: str) -> str:
    return GEOFENCE_ENDPOINT.format(geofence_id=quote(geofence_id, safe=""))


async def fetch_geofences(transport: Transport) -> list[GeofenceRecord]:
    """List every stored zone.

    Rows that are not even shaped like a zone record are skipped; geometry
    decoding is left to the caller.
    """
    body = await transport.request_json("GET", GEOFENCES_ENDPOINT)
    if body is None:
        return []
    if not isinstance(body, list):
        raise GeoTransportError(
            f"Unexpected geofence payload type {type(body).__name__}",
            endpoint=GEOFENCES_ENDPOINT,
        )

    records: list[GeofenceRecord] = []
    for row in body:
        try:
            records.append(GeofenceRecord.model_validate(row))
        except ValidationError:
            _logger.warning("Skipping malformed geofence row: %s", row)
    return records


async def create_geofence(transport: Transport, name: str, geojson: str) -> Any:
    return await transport.request_json(
        "POST",
        GEOFENCES_ENDPOINT,
        payload={"name": name, "geojson": geojson},
    )


async def update_geofence(transport: Transport, geofence_id: str, name: str, geojson: str | None) -> Any:
    """Rename a zone, and replace its geometry when *geojson* is given."""
    payload: dict[str, str] = {"name": name}
    if geojson is not None:
        payload["geojson"] = geojson
    return await transport.request_json("PUT", _geofence_endpoint(geofence_id), payload=payload)


async def delete_geofence(transport: Transport, geofence_id: str) -> Any:
    return await transport.request_json("DELETE", _geofence_endpoint(geofence_id))

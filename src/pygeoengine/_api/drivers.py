"""Driver endpoints.

Endpoints:
  - /drivers/nearby (bulk snapshot around a centre point)
  - /drivers/{device_id}/route (recorded path of one device)
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

from pydantic import ValidationError

from pygeoengine._constants import DRIVER_ROUTE_ENDPOINT, NEARBY_DRIVERS_ENDPOINT
from pygeoengine._transport import Transport
from pygeoengine.config import GeoConfig
from pygeoengine.exceptions import GeoTransportError
from pygeoengine.geometry import LatLng, line_from_geojson
from pygeoengine.models.driver import Driver

_logger = logging.getLogger(__name__)


def _parse_drivers(rows: Any) -> list[Driver]:
    """Parse driver rows, skipping rows that fail validation."""
    if not isinstance(rows, list):
        return []
    drivers: list[Driver] = []
    for row in rows:
        try:
            drivers.append(Driver.model_validate(row))
        except ValidationError:
            _logger.warning("Skipping malformed driver row: %s", row)
    return drivers


async def fetch_nearby_drivers(config: GeoConfig, transport: Transport) -> list[Driver]:
    """Fetch drivers within ``config.search_radius`` metres of the configured centre.

    The backend wraps rows as ``{"data": [...], "count": n, "source": ...}``
    and sends ``"data": null`` when nothing is nearby.
    """
    body = await transport.request_json(
        "GET",
        NEARBY_DRIVERS_ENDPOINT,
        params={
            "lat": config.center_latitude,
            "lng": config.center_longitude,
            "radius": config.search_radius,
        },
    )
    if not isinstance(body, dict):
        raise GeoTransportError(
            f"Unexpected driver payload type {type(body).__name__}",
            endpoint=NEARBY_DRIVERS_ENDPOINT,
        )
    drivers = _parse_drivers(body.get("data"))
    _logger.debug("Fetched %d nearby drivers source=%s", len(drivers), body.get("source"))
    return drivers


async def fetch_driver_route(transport: Transport, device_id: str) -> list[LatLng]:
    """Fetch the recorded route of *device_id*, in display order.

    Raises
    ------
    GeoTransportError
        If the request fails.
    GeoDecodeError
        If the route payload has no usable coordinates.
    """
    endpoint = DRIVER_ROUTE_ENDPOINT.format(device_id=quote(device_id, safe=""))
    body = await transport.request_json("GET", endpoint)
    if body is None:
        return []
    return line_from_geojson(body)

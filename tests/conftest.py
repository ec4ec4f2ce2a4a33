from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

import pytest

from pygeoengine.exceptions import GeoTransportError


def polygon(*lon_lat: tuple[float, float]) -> str:
    """GeoJSON polygon string from storage-order positions (ring left as given)."""
    return json.dumps({"type": "Polygon", "coordinates": [[list(p) for p in lon_lat]]})


@dataclass
class FakeGeoBackend:
    """In-memory stand-in for the geo backend, speaking the `Transport` protocol."""

    drivers: list[dict[str, Any]] = field(default_factory=list)
    routes: dict[str, list[list[float]]] = field(default_factory=dict)
    zones: dict[str, dict[str, str]] = field(default_factory=dict)
    failures: set[tuple[str, str]] = field(default_factory=set)
    calls: list[tuple[str, str, dict[str, Any] | None]] = field(default_factory=list)
    next_id: int = 1

    def count(self, method: str, endpoint: str) -> int:
        return sum(1 for m, e, _ in self.calls if m == method and e == endpoint)

    async def request_json(
        self,
        method: str,
        endpoint: str,
        *,
        params: Mapping[str, Any] | None = None,
        payload: Mapping[str, Any] | None = None,
    ) -> Any:
        self.calls.append((method, endpoint, dict(payload) if payload is not None else None))
        if (method, endpoint) in self.failures:
            raise GeoTransportError(f"HTTP 500 from {method} {endpoint}", status_code=500, endpoint=endpoint)

        if endpoint == "/drivers/nearby":
            return {"data": self.drivers or None, "count": len(self.drivers), "source": "database"}
        if endpoint.startswith("/drivers/") and endpoint.endswith("/route"):
            device_id = endpoint.split("/")[2]
            return {"type": "LineString", "coordinates": self.routes.get(device_id, [])}

        if endpoint == "/geofences":
            if method == "GET":
                return [{"id": zone_id, **zone} for zone_id, zone in self.zones.items()]
            assert payload is not None
            zone_id = f"z{self.next_id}"
            self.next_id += 1
            self.zones[zone_id] = {"name": payload["name"], "geojson": payload["geojson"]}
            return {"id": zone_id}

        zone_id = endpoint.rsplit("/", 1)[1]
        if zone_id not in self.zones:
            raise GeoTransportError(f"HTTP 404 from {method} {endpoint}", status_code=404, endpoint=endpoint)
        if method == "PUT":
            assert payload is not None
            self.zones[zone_id].update(payload)
            return {"status": "updated"}
        if method == "DELETE":
            del self.zones[zone_id]
            return None
        raise AssertionError(f"unexpected request {method} {endpoint}")


@pytest.fixture
def backend() -> FakeGeoBackend:
    return FakeGeoBackend()

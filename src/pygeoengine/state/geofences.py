"""Authoritative collection of persisted geofences.

Every successful mutation is followed by a full :meth:`GeofenceStore.refresh`;
the local collection is only ever replaced wholesale from what the
server lists, never patched with locally built geometry.

A mutation counts as done once the server accepts it.  If the follow-up
refresh fails the store is flagged :attr:`GeofenceStore.is_stale` until a
later refresh succeeds; the mutation itself is not reported as failed.
Refreshes are stamped when they start, and a result older than the one
already applied is discarded.
"""

from __future__ import annotations

import contextlib
import itertools
import logging
import time
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field
from enum import StrEnum

from pygeoengine._api import geofences as _geofences_api
from pygeoengine._transport import Transport
from pygeoengine.exceptions import GeoDecodeError, GeoTransportError, GeoValidationError
from pygeoengine.geometry import LatLng, polygon_geojson
from pygeoengine.models.geofence import Geofence

_logger = logging.getLogger(__name__)


class MutationKind(StrEnum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


@dataclass(frozen=True)
class PendingMutation:
    """A mutation that has been submitted and not yet settled."""

    token: int
    kind: MutationKind
    geofence_id: str | None
    started_at: float = field(default_factory=time.monotonic)


def _require_name(name: str) -> str:
    stripped = name.strip()
    if not stripped:
        raise GeoValidationError("zone name is required")
    return stripped


class GeofenceStore:
    """Persisted zones plus bookkeeping for in-flight server round trips."""

    def __init__(self, transport: Transport) -> None:
        self._transport = transport
        self._geofences: dict[str, Geofence] = {}
        self._pending: dict[int, PendingMutation] = {}
        self._tokens = itertools.count(1)
        self._generations = itertools.count(1)
        self._applied_generation = 0
        self._failed_generation = 0

    def __len__(self) -> int:
        return len(self._geofences)

    def geofences(self) -> tuple[Geofence, ...]:
        return tuple(self._geofences.values())

    def get(self, geofence_id: str) -> Geofence | None:
        return self._geofences.get(geofence_id)

    @property
    def pending(self) -> tuple[PendingMutation, ...]:
        return tuple(self._pending.values())

    @property
    def is_busy(self) -> bool:
        return bool(self._pending)

    @property
    def is_stale(self) -> bool:
        """Whether the newest refresh attempt failed, so the collection may lag the server."""
        return self._failed_generation > self._applied_generation

    async def refresh(self) -> None:
        """Reload every zone from the server and replace the collection.

        Records whose stored geometry cannot be decoded are logged and
        skipped.  A result is discarded when a refresh started later has
        already been applied.  On :class:`GeoTransportError` the previous
        collection is left untouched and the error propagates.
        """
        generation = next(self._generations)
        try:
            records = await _geofences_api.fetch_geofences(self._transport)
        except GeoTransportError:
            self._failed_generation = max(self._failed_generation, generation)
            raise

        if generation < self._applied_generation:
            _logger.debug(
                "Discarding outdated geofence refresh generation=%d applied=%d",
                generation,
                self._applied_generation,
            )
            return

        replacement: dict[str, Geofence] = {}
        for record in records:
            try:
                replacement[record.id] = Geofence.from_record(record)
            except GeoDecodeError as exc:
                _logger.warning("Ignoring geofence id=%s with malformed geometry: %s", record.id, exc)

        self._geofences = replacement
        self._applied_generation = generation
        _logger.debug("Geofences refreshed count=%d skipped=%d", len(replacement), len(records) - len(replacement))

    async def _resync(self, kind: MutationKind) -> None:
        # The mutation already took effect; a failed refresh only leaves the store stale.
        try:
            await self.refresh()
        except GeoTransportError as exc:
            _logger.warning("Geofence %s succeeded but refresh failed: %s", kind, exc)

    @contextlib.contextmanager
    def _track(self, kind: MutationKind, geofence_id: str | None) -> Iterator[PendingMutation]:
        mutation = PendingMutation(token=next(self._tokens), kind=kind, geofence_id=geofence_id)
        self._pending[mutation.token] = mutation
        try:
            yield mutation
        finally:
            self._pending.pop(mutation.token, None)

    async def create(self, name: str, ring_lat_lng: Sequence[LatLng]) -> None:
        """Persist a new zone, then refresh.

        *ring_lat_lng* may be open or already closed; it is closed and
        converted to (lon, lat) before submission.  A failed follow-up
        refresh is logged and flags :attr:`is_stale`; it does not raise.

        Raises
        ------
        GeoValidationError
            If the name is blank or the ring has fewer than 3 vertices.
        GeoTransportError
            If the create request fails.  Nothing was stored.
        """
        clean_name = _require_name(name)
        geojson = polygon_geojson(ring_lat_lng)
        with self._track(MutationKind.CREATE, None):
            await _geofences_api.create_geofence(self._transport, clean_name, geojson)
            _logger.debug("Geofence created name=%s", clean_name)
            await self._resync(MutationKind.CREATE)

    async def update(self, geofence_id: str, name: str, ring_lat_lng: Sequence[LatLng] | None) -> None:
        """Rename a zone and, when *ring_lat_lng* is given, replace its shape; then refresh."""
        clean_name = _require_name(name)
        geojson = polygon_geojson(ring_lat_lng) if ring_lat_lng is not None else None
        with self._track(MutationKind.UPDATE, geofence_id):
            await _geofences_api.update_geofence(self._transport, geofence_id, clean_name, geojson)
            _logger.debug("Geofence updated id=%s geometry=%s", geofence_id, geojson is not None)
            await self._resync(MutationKind.UPDATE)

    async def delete(self, geofence_id: str) -> None:
        with self._track(MutationKind.DELETE, geofence_id):
            await _geofences_api.delete_geofence(self._transport, geofence_id)
            _logger.debug("Geofence deleted id=%s", geofence_id)
            await self._resync(MutationKind.DELETE)

"""High-level async console engine for the geo backend."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

import aiohttp

from pygeoengine._api import drivers as _drivers_api
from pygeoengine._stream import StreamRuntime
from pygeoengine._transport import HttpTransport, Transport
from pygeoengine.config import GeoConfig
from pygeoengine.exceptions import GeoDecodeError, GeoError, GeoTransportError, GeoValidationError
from pygeoengine.geometry import LatLng
from pygeoengine.ingestion.stream import StreamDispatcher
from pygeoengine.models.alert import Alert
from pygeoengine.models.geofence import Geofence
from pygeoengine.state.alerts import AlertFeed
from pygeoengine.state.drivers import DriverMarker, DriverRegistry
from pygeoengine.state.edit_session import EditState, PolygonEditSession
from pygeoengine.state.geofences import GeofenceStore

_logger = logging.getLogger(__name__)


class NotificationLevel(StrEnum):
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class Notification:
    """Transient outcome of an operator command."""

    message: str
    level: NotificationLevel


@dataclass(frozen=True)
class ConsoleSnapshot:
    """Everything the view needs to render one frame."""

    drivers: tuple[DriverMarker, ...]
    geofences: tuple[Geofence, ...]
    alerts: tuple[Alert, ...]
    edit: EditState
    selected_device_id: str | None
    route: tuple[LatLng, ...]


class GeoConsole:
    """Async engine behind the operator console.

    Usage::

        async with GeoConsole(config, on_notification=print) as console:
            await console.start()
            console.start_drawing()
            ...

    Commands that can fail for recoverable reasons return ``bool`` and
    report the outcome through ``on_notification`` instead of raising.
    """

    def __init__(
        self,
        config: GeoConfig,
        *,
        session: aiohttp.ClientSession | None = None,
        transport: Transport | None = None,
        on_notification: Callable[[Notification], None] | None = None,
    ) -> None:
        self._config = config
        self._external_session = session is not None
        self._http_session = session
        self._transport: Transport | None = transport
        self._on_notification = on_notification
        self._stream: StreamRuntime | None = None
        self._route: tuple[LatLng, ...] = ()

        self.registry = DriverRegistry()
        self.alerts = AlertFeed(config.alert_capacity)
        self.editor = PolygonEditSession()
        self.dispatcher = StreamDispatcher(self.registry, self.alerts)
        self._geofences: GeofenceStore | None = GeofenceStore(transport) if transport is not None else None

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> GeoConsole:
        if self._transport is None:
            if self._http_session is None:
                self._http_session = aiohttp.ClientSession()
            self._transport = HttpTransport(self._config, self._http_session)
            self._geofences = GeofenceStore(self._transport)
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the push stream and any session this console created.  Idempotent."""
        await self._stop_stream()
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _require_transport(self) -> Transport:
        if self._transport is None:
            raise GeoError("Console not initialized. Use 'async with GeoConsole(...) as console:'")
        return self._transport

    @property
    def geofences(self) -> GeofenceStore:
        if self._geofences is None:
            raise GeoError("Console not initialized. Use 'async with GeoConsole(...) as console:'")
        return self._geofences

    def _notify(self, message: str, level: NotificationLevel) -> None:
        if level is NotificationLevel.ERROR:
            _logger.warning("%s", message)
        if self._on_notification is None:
            return
        try:
            self._on_notification(Notification(message, level))
        except Exception:
            _logger.debug("on_notification callback failed", exc_info=True)

    def _fail(self, message: str, exc: GeoError) -> bool:
        _logger.debug("%s", message, exc_info=exc)
        detail = str(exc) if isinstance(exc, GeoValidationError) else message
        self._notify(detail, NotificationLevel.ERROR)
        return False

    def _warn_if_stale(self) -> None:
        if self.geofences.is_stale:
            self._notify("Zone list could not be refreshed", NotificationLevel.ERROR)

    # ------------------------------------------------------------------
    # Startup and push stream
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Load the initial snapshot, then open the push stream.

        Every step is best-effort: failures are notified and the console
        keeps running with whatever loaded.
        """
        await self.load_drivers()
        await self.refresh_geofences()
        if self._config.stream_enabled:
            await self._ensure_stream_started()

    async def load_drivers(self) -> bool:
        try:
            drivers = await _drivers_api.fetch_nearby_drivers(self._config, self._require_transport())
        except GeoTransportError as exc:
            return self._fail("Could not load drivers", exc)
        self.registry.load_snapshot(drivers)
        return True

    async def refresh_geofences(self) -> bool:
        try:
            await self.geofences.refresh()
        except GeoTransportError as exc:
            return self._fail("Could not load zones", exc)
        return True

    async def _ensure_stream_started(self) -> None:
        if self._stream is not None and self._stream.is_running:
            return
        if self._http_session is None:
            _logger.debug("No HTTP session available; push stream not started")
            return
        runtime = StreamRuntime(
            http_session=self._http_session,
            url=self._config.stream_url,
            on_frame=self.dispatcher.dispatch,
            heartbeat=self._config.stream_heartbeat,
            logger=_logger,
        )
        try:
            await runtime.start()
        except GeoTransportError as exc:
            self._fail("Live updates unavailable", exc)
            return
        self._stream = runtime

    async def _stop_stream(self) -> None:
        runtime = self._stream
        self._stream = None
        if runtime is not None:
            await runtime.stop()

    @property
    def is_streaming(self) -> bool:
        return self._stream is not None and self._stream.is_running

    # ------------------------------------------------------------------
    # Driver selection
    # ------------------------------------------------------------------

    async def select_driver(self, device_id: str) -> tuple[LatLng, ...]:
        """Select *device_id* and load its route.

        A failed route lookup leaves the selection in place with an
        empty route.
        """
        self.registry.select(device_id)
        self._route = ()
        try:
            route = await _drivers_api.fetch_driver_route(self._require_transport(), device_id)
        except (GeoTransportError, GeoDecodeError):
            _logger.debug("Route lookup failed device_id=%s", device_id, exc_info=True)
            return self._route
        # The operator may have selected another device meanwhile.
        if self.registry.selected == device_id:
            self._route = tuple(route)
        return tuple(route)

    def clear_selection(self) -> None:
        self.registry.clear_selection()
        self._route = ()

    # ------------------------------------------------------------------
    # Zone editing
    # ------------------------------------------------------------------

    def start_drawing(self) -> bool:
        try:
            self.editor.start_drawing()
        except GeoValidationError as exc:
            return self._fail("Cannot start drawing", exc)
        return True

    def begin_edit(self, geofence_id: str) -> bool:
        geofence = self.geofences.get(geofence_id)
        if geofence is None:
            self._notify("Zone no longer exists", NotificationLevel.ERROR)
            return False
        self.editor.begin_edit(geofence)
        return True

    def cancel_edit(self) -> None:
        self.editor.cancel()

    def suggested_name(self) -> str:
        """Name to pre-fill in the naming step: the edited zone's current name, else blank."""
        target_id = self.editor.target_id
        if target_id is None:
            return ""
        geofence = self.geofences.get(target_id)
        return geofence.name if geofence is not None else ""

    async def save_geometry(self, name: str) -> bool:
        """Commit the current polygon and save it under *name*."""
        try:
            finished = self.editor.commit()
            await self.editor.submit(finished, name, self.geofences)
        except GeoValidationError as exc:
            return self._fail("Zone not saved", exc)
        except GeoTransportError as exc:
            return self._fail("Error saving zone", exc)
        self._notify("Zone created" if finished.is_new else "Zone updated", NotificationLevel.SUCCESS)
        self._warn_if_stale()
        return True

    async def rename_geofence(self, geofence_id: str, name: str) -> bool:
        try:
            await self.geofences.update(geofence_id, name, None)
        except GeoValidationError as exc:
            return self._fail("Zone not renamed", exc)
        except GeoTransportError as exc:
            return self._fail("Error renaming zone", exc)
        self._notify("Zone updated", NotificationLevel.SUCCESS)
        self._warn_if_stale()
        return True

    async def delete_geofence(self, geofence_id: str) -> bool:
        try:
            await self.geofences.delete(geofence_id)
        except GeoTransportError as exc:
            return self._fail("Error deleting zone", exc)
        if self.editor.is_editing(geofence_id):
            self.editor.cancel()
        self._notify("Zone deleted", NotificationLevel.SUCCESS)
        self._warn_if_stale()
        return True

    def dismiss_alert(self, alert_id: int) -> bool:
        return self.alerts.dismiss(alert_id)

    # ------------------------------------------------------------------
    # View model
    # ------------------------------------------------------------------

    def snapshot(self) -> ConsoleSnapshot:
        edit = self.editor.state()
        # The zone being reshaped is drawn from the edit vertices instead.
        geofences = tuple(g for g in self.geofences.geofences() if not self.editor.is_editing(g.id))
        return ConsoleSnapshot(
            drivers=self.registry.markers(),
            geofences=geofences,
            alerts=self.alerts.alerts(),
            edit=edit,
            selected_device_id=self.registry.selected,
            route=self._route,
        )

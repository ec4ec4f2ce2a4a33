"""Push stream ingestion.

Routes decoded push messages to the driver registry and the alert feed.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from datetime import UTC, datetime
from typing import Any

from pygeoengine._redact import redact_for_log
from pygeoengine.exceptions import GeoDecodeError
from pygeoengine.models.alert import Alert
from pygeoengine.models.messages import (
    GeofenceEvent,
    LocationUpdate,
    StreamMessage,
    UnknownMessage,
    decode_stream_message,
)
from pygeoengine.state.alerts import AlertFeed
from pygeoengine.state.drivers import DriverRegistry

_logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class StreamDispatcher:
    """Folds push messages into the stores, strictly in arrival order.

    :meth:`dispatch` never raises for bad input: malformed frames and
    unknown message types are logged and dropped.
    """

    def __init__(
        self,
        registry: DriverRegistry,
        alerts: AlertFeed,
        *,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._registry = registry
        self._alerts = alerts
        self._clock = clock
        self._last_alert_id = 0

    def dispatch(self, frame: str | bytes | Mapping[str, Any]) -> StreamMessage | None:
        """Decode and apply one frame; return the decoded message, or ``None`` if dropped."""
        try:
            message = decode_stream_message(frame)
        except GeoDecodeError as exc:
            _logger.warning("Dropping undecodable stream frame: %s", exc)
            _logger.debug("Dropped frame: %s", redact_for_log(frame, max_string=256))
            return None

        if isinstance(message, LocationUpdate):
            self._registry.apply_update(message.device_id, message.latitude, message.longitude, message.heading)
        elif isinstance(message, GeofenceEvent):
            self._alerts.push(self._build_alert(message))
        elif isinstance(message, UnknownMessage):
            _logger.debug("Ignoring stream message type=%r", message.type)
            return None
        return message

    def _next_alert_id(self, timestamp: datetime) -> int:
        # Epoch milliseconds, bumped so that ids stay strictly increasing.
        candidate = int(timestamp.timestamp() * 1000)
        self._last_alert_id = max(candidate, self._last_alert_id + 1)
        return self._last_alert_id

    def _build_alert(self, event: GeofenceEvent) -> Alert:
        timestamp = self._clock()
        alert = Alert(
            id=self._next_alert_id(timestamp),
            title=Alert.title_for(event.event),
            body=f"{event.device_id} in {event.zone_name}",
            timestamp=timestamp,
            kind=event.event,
        )
        _logger.info("Geofence %s device=%s zone=%s", event.event, event.device_id, event.zone_name)
        return alert

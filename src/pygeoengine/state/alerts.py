"""Bounded, most-recent-first feed of geofence alerts."""

from __future__ import annotations

from collections import deque

from pygeoengine._constants import ALERT_FEED_CAPACITY
from pygeoengine.models.alert import Alert


class AlertFeed:
    """Keeps the ``capacity`` most recently pushed alerts.

    Retention is purely count based: pushing past capacity evicts the
    oldest entry, regardless of its timestamp.
    """

    def __init__(self, capacity: int = ALERT_FEED_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError(f"capacity must be at least 1, got {capacity}")
        self._capacity = capacity
        self._alerts: deque[Alert] = deque(maxlen=capacity)

    def __len__(self) -> int:
        return len(self._alerts)

    @property
    def capacity(self) -> int:
        return self._capacity

    def push(self, alert: Alert) -> None:
        self._alerts.appendleft(alert)

    def dismiss(self, alert_id: int) -> bool:
        """Remove the alert with *alert_id*; return whether it was present."""
        for alert in self._alerts:
            if alert.id == alert_id:
                self._alerts.remove(alert)
                return True
        return False

    def clear(self) -> None:
        self._alerts.clear()

    def alerts(self) -> tuple[Alert, ...]:
        """Retained alerts, most recent first."""
        return tuple(self._alerts)

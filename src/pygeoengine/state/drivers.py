"""Driver registry.

Merges the bulk driver snapshot with streamed position updates, keyed by
``device_id``.  This is the only component allowed to mutate the driver
collection.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from pygeoengine._constants import LIVE_DRIVER_ID_PREFIX
from pygeoengine.models.driver import Driver

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DriverMarker:
    """A driver plus the render hint derived from the current selection."""

    driver: Driver
    dimmed: bool


class DriverRegistry:
    """In-memory store of the latest known position per device.

    Drivers are never evicted by stream inactivity; only a new snapshot
    removes entries.
    """

    def __init__(self) -> None:
        self._drivers: dict[str, Driver] = {}
        # Devices upserted from the stream since the last snapshot.
        self._streamed: set[str] = set()
        self._selected: str | None = None

    def __len__(self) -> int:
        return len(self._drivers)

    def load_snapshot(self, drivers: Iterable[Driver]) -> None:
        """Replace the whole collection with a bulk fetch result.

        A device that the stream already updated since the previous
        snapshot keeps its streamed position and heading; the snapshot
        only contributes its record id.
        """
        replacement: dict[str, Driver] = {}
        for driver in drivers:
            streamed = self._drivers.get(driver.device_id) if driver.device_id in self._streamed else None
            if streamed is not None:
                driver = streamed.model_copy(update={"id": driver.id})
            replacement[driver.device_id] = driver

        dropped = len(set(self._drivers) - set(replacement))
        self._drivers = replacement
        self._streamed.clear()
        _logger.debug("Driver snapshot loaded count=%d dropped=%d", len(replacement), dropped)

    def apply_update(self, device_id: str, latitude: float, longitude: float, heading: float) -> Driver:
        """Upsert a streamed position.

        Existing entries keep their ``id``; unknown devices are inserted
        with a ``live-`` prefixed id.
        """
        existing = self._drivers.get(device_id)
        if existing is None:
            driver = Driver(
                id=f"{LIVE_DRIVER_ID_PREFIX}{device_id}",
                device_id=device_id,
                latitude=latitude,
                longitude=longitude,
                heading=heading,
            )
            _logger.debug("Driver registered from stream device_id=%s", device_id)
        else:
            driver = existing.model_copy(
                update={"latitude": latitude, "longitude": longitude, "heading": heading},
            )
        self._drivers[device_id] = driver
        self._streamed.add(device_id)
        return driver

    def get(self, device_id: str) -> Driver | None:
        return self._drivers.get(device_id)

    def drivers(self) -> tuple[Driver, ...]:
        """All drivers, in first-seen order."""
        return tuple(self._drivers.values())

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    @property
    def selected(self) -> str | None:
        return self._selected

    def select(self, device_id: str) -> None:
        self._selected = device_id

    def clear_selection(self) -> None:
        self._selected = None

    def is_dimmed(self, device_id: str) -> bool:
        """Whether *device_id* should render dimmed because another device is selected."""
        return self._selected is not None and self._selected != device_id

    def markers(self) -> tuple[DriverMarker, ...]:
        return tuple(DriverMarker(driver, self.is_dimmed(driver.device_id)) for driver in self._drivers.values())

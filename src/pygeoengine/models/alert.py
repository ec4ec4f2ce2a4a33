"""Geofence alert model."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum

from pydantic import Field

from pygeoengine.models._base import GeoBaseModel


class AlertKind(StrEnum):
    ENTER = "ENTER"
    EXIT = "EXIT"


_TITLES: dict[AlertKind, str] = {
    AlertKind.ENTER: "Entry",
    AlertKind.EXIT: "Exit",
}


class Alert(GeoBaseModel):
    """A device crossing a zone boundary.  Immutable once created."""

    id: int = Field(..., description="Monotonic id (epoch milliseconds, bumped on collision)")
    title: str
    body: str
    timestamp: datetime
    kind: AlertKind

    @staticmethod
    def title_for(kind: AlertKind) -> str:
        return _TITLES[kind]

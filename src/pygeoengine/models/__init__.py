"""Data models for geo backend payloads and push stream messages."""

from pygeoengine.models._base import GeoBaseModel
from pygeoengine.models.alert import Alert, AlertKind
from pygeoengine.models.driver import Driver
from pygeoengine.models.geofence import Geofence, GeofenceRecord
from pygeoengine.models.messages import (
    GeofenceEvent,
    LocationUpdate,
    MessageType,
    StreamMessage,
    UnknownMessage,
    decode_stream_message,
)

__all__ = [
    "Alert",
    "AlertKind",
    "Driver",
    "GeoBaseModel",
    "Geofence",
    "GeofenceEvent",
    "GeofenceRecord",
    "LocationUpdate",
    "MessageType",
    "StreamMessage",
    "UnknownMessage",
    "decode_stream_message",
]

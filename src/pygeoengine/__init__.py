"""pygeoengine - Async state engine for a live fleet and geofence console."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pygeoengine")
except PackageNotFoundError:
    __version__ = "0+local"
from pygeoengine.client import ConsoleSnapshot, GeoConsole, Notification, NotificationLevel
from pygeoengine.config import GeoConfig
from pygeoengine.exceptions import (
    GeoConfigError,
    GeoDecodeError,
    GeoError,
    GeoTransportError,
    GeoValidationError,
)
from pygeoengine.ingestion.stream import StreamDispatcher
from pygeoengine.models import (
    Alert,
    AlertKind,
    Driver,
    Geofence,
    GeofenceEvent,
    GeofenceRecord,
    LocationUpdate,
    StreamMessage,
    UnknownMessage,
)
from pygeoengine.state.alerts import AlertFeed
from pygeoengine.state.drivers import DriverMarker, DriverRegistry
from pygeoengine.state.edit_session import EditMode, EditState, FinishedGeometry, PolygonEditSession
from pygeoengine.state.geofences import GeofenceStore, MutationKind, PendingMutation

__all__ = [
    "__version__",
    "Alert",
    "AlertFeed",
    "AlertKind",
    "ConsoleSnapshot",
    "Driver",
    "DriverMarker",
    "DriverRegistry",
    "EditMode",
    "EditState",
    "FinishedGeometry",
    "GeoConfig",
    "GeoConfigError",
    "GeoConsole",
    "GeoDecodeError",
    "GeoError",
    "GeoTransportError",
    "GeoValidationError",
    "Geofence",
    "GeofenceEvent",
    "GeofenceRecord",
    "GeofenceStore",
    "LocationUpdate",
    "MutationKind",
    "Notification",
    "NotificationLevel",
    "PendingMutation",
    "PolygonEditSession",
    "StreamDispatcher",
    "StreamMessage",
    "UnknownMessage",
]

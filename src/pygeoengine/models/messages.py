"""Push stream message variants.

Every frame received on the push stream decodes into exactly one of
:class:`LocationUpdate`, :class:`GeofenceEvent` or :class:`UnknownMessage`.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from enum import StrEnum
from typing import Any, Literal, cast

from pydantic import Field, ValidationError, field_validator

from pygeoengine.exceptions import GeoDecodeError
from pygeoengine.models._base import DeviceId, GeoBaseModel, Heading, Latitude, Longitude
from pygeoengine.models.alert import AlertKind


class MessageType(StrEnum):
    LOCATION_UPDATE = "LOCATION_UPDATE"
    GEOFENCE_EVENT = "GEOFENCE_EVENT"


class LocationUpdate(GeoBaseModel):
    """A device reported a new position."""

    type: Literal["LOCATION_UPDATE"] = "LOCATION_UPDATE"
    device_id: DeviceId
    latitude: Latitude
    longitude: Longitude
    heading: Heading = 0.0


class GeofenceEvent(GeoBaseModel):
    """A device entered or left a zone."""

    type: Literal["GEOFENCE_EVENT"] = "GEOFENCE_EVENT"
    event: AlertKind
    device_id: DeviceId
    zone_name: str = ""

    @field_validator("event", mode="before")
    @classmethod
    def _upper_event(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().upper()
        return value


class UnknownMessage(GeoBaseModel):
    """A well-formed frame of a type this console does not handle."""

    type: str = ""
    raw: dict[str, Any] = Field(default_factory=dict)


StreamMessage = LocationUpdate | GeofenceEvent | UnknownMessage

_VARIANTS: dict[str, type[LocationUpdate] | type[GeofenceEvent]] = {
    MessageType.LOCATION_UPDATE: LocationUpdate,
    MessageType.GEOFENCE_EVENT: GeofenceEvent,
}


def decode_stream_message(frame: str | bytes | Mapping[str, Any]) -> StreamMessage:
    """Decode one push stream frame.

    Raises
    ------
    GeoDecodeError
        If the frame is not a JSON object, or is a known message type
        whose fields fail validation.
    """
    if isinstance(frame, Mapping):
        payload: Any = dict(frame)
    else:
        try:
            payload = json.loads(frame)
        except (TypeError, ValueError) as exc:
            raise GeoDecodeError(f"stream frame is not valid JSON: {exc}") from exc

    if not isinstance(payload, dict):
        raise GeoDecodeError(f"stream frame decoded to {type(payload).__name__}, expected an object")

    message_type = payload.get("type")
    variant = _VARIANTS.get(message_type) if isinstance(message_type, str) else None

    try:
        if variant is None:
            return UnknownMessage(type=str(message_type or ""), raw=payload)
        return cast(StreamMessage, variant.model_validate(payload))
    except ValidationError as exc:
        raise GeoDecodeError(f"invalid {message_type} frame: {exc.error_count()} error(s)") from exc

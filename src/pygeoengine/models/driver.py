"""Driver position model."""

from __future__ import annotations

from pydantic import AliasChoices, Field, model_validator

from pygeoengine.geometry import LatLng
from pygeoengine.models._base import DeviceId, GeoBaseModel, Heading, Latitude, Longitude, RecordId


class Driver(GeoBaseModel):
    """Last known position of a tracked device.

    Parameters
    ----------
    id : str
        Record id as reported by its source.  Not used for merging; the
        bulk endpoint's cache path omits it, in which case it defaults to
        ``device_id``.
    device_id : str
        Stable identity shared by the bulk fetch and the push stream.
    latitude : float
        Latitude in degrees.
    longitude : float
        Longitude in degrees.
    heading : float
        Heading in degrees, ``0.0`` when unknown.
    """

    id: RecordId = ""
    device_id: DeviceId = Field(..., validation_alias=AliasChoices("device_id", "deviceId"))
    latitude: Latitude = Field(..., validation_alias=AliasChoices("latitude", "lat"))
    longitude: Longitude = Field(..., validation_alias=AliasChoices("longitude", "lng", "lon"))
    heading: Heading = 0.0

    @model_validator(mode="after")
    def _default_id(self) -> Driver:
        if not self.id:
            object.__setattr__(self, "id", self.device_id)
        return self

    @property
    def position(self) -> LatLng:
        """Display-order ``(latitude, longitude)``."""
        return (self.latitude, self.longitude)

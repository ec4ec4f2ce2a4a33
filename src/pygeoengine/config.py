"""Client configuration for pygeoengine."""

from __future__ import annotations

import dataclasses
import os
from typing import Any
from urllib.parse import urlencode, urlsplit, urlunsplit

from pygeoengine._constants import (
    ALERT_FEED_CAPACITY,
    API_KEY_QUERY_PARAM,
    API_URL,
    DEFAULT_CENTER_LATITUDE,
    DEFAULT_CENTER_LONGITUDE,
    DEFAULT_SEARCH_RADIUS_M,
    WS_URL,
)
from pygeoengine.exceptions import GeoConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _env_number(env_key: str, value: str, cast: type[float] | type[int]) -> float | int:
    try:
        return cast(value)
    except ValueError as exc:
        raise GeoConfigError(f"{env_key} must be numeric, got {value!r}") from exc


@dataclasses.dataclass(frozen=True)
class GeoConfig:
    """Console configuration.

    Parameters
    ----------
    api_url : str
        Base URL of the geo backend HTTP API.
    ws_url : str
        URL of the push stream websocket.
    api_key : str or None
        Shared API key.  Sent as the ``X-Geo-Key`` header on HTTP calls
        and as the ``key`` query parameter on the websocket URL.
    center_latitude : float
        Latitude of the point the initial driver fetch searches around.
    center_longitude : float
        Longitude of the point the initial driver fetch searches around.
    search_radius : float
        Radius in metres for the initial driver fetch.
    request_timeout : float
        Total timeout in seconds for a single HTTP request.
    stream_enabled : bool
        Open the push stream on :meth:`GeoConsole.start`.
    stream_heartbeat : float or None
        Websocket ping interval in seconds; ``None`` disables pings.
    alert_capacity : int
        Number of geofence alerts retained by the alert feed.
    """

    api_url: str = API_URL
    ws_url: str = WS_URL
    api_key: str | None = None
    center_latitude: float = DEFAULT_CENTER_LATITUDE
    center_longitude: float = DEFAULT_CENTER_LONGITUDE
    search_radius: float = DEFAULT_SEARCH_RADIUS_M
    request_timeout: float = 10.0
    stream_enabled: bool = True
    stream_heartbeat: float | None = 30.0
    alert_capacity: int = ALERT_FEED_CAPACITY

    def __post_init__(self) -> None:
        if self.search_radius <= 0:
            raise GeoConfigError(f"search_radius must be positive, got {self.search_radius}")
        if self.alert_capacity < 1:
            raise GeoConfigError(f"alert_capacity must be at least 1, got {self.alert_capacity}")
        if not -90.0 <= self.center_latitude <= 90.0:
            raise GeoConfigError(f"center_latitude out of range: {self.center_latitude}")
        if not -180.0 <= self.center_longitude <= 180.0:
            raise GeoConfigError(f"center_longitude out of range: {self.center_longitude}")

    @property
    def stream_url(self) -> str:
        """Websocket URL with the API key attached as a query parameter."""
        if not self.api_key:
            return self.ws_url
        parts = urlsplit(self.ws_url)
        key_query = urlencode({API_KEY_QUERY_PARAM: self.api_key})
        query = f"{parts.query}&{key_query}" if parts.query else key_query
        return urlunsplit(parts._replace(query=query))

    @classmethod
    def from_env(cls, **overrides: Any) -> GeoConfig:
        """Create configuration from environment variables.

        Reads ``GEO_API_URL``, ``GEO_WS_URL``, ``GEO_API_KEY`` and the
        optional numeric ``GEO_*`` variables.  Explicit keyword arguments
        override environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        GeoConfig
            Populated configuration.

        Raises
        ------
        GeoConfigError
            If a numeric variable cannot be parsed or a value is out of range.
        """
        env = os.environ

        _ENV_CONFIG_MAP = {
            "GEO_API_URL": "api_url",
            "GEO_WS_URL": "ws_url",
            "GEO_API_KEY": "api_key",
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        _ENV_NUMERIC_MAP: dict[str, tuple[str, type[float] | type[int]]] = {
            "GEO_CENTER_LATITUDE": ("center_latitude", float),
            "GEO_CENTER_LONGITUDE": ("center_longitude", float),
            "GEO_SEARCH_RADIUS": ("search_radius", float),
            "GEO_REQUEST_TIMEOUT": ("request_timeout", float),
            "GEO_STREAM_HEARTBEAT": ("stream_heartbeat", float),
            "GEO_ALERT_CAPACITY": ("alert_capacity", int),
        }
        for env_key, (field_name, cast) in _ENV_NUMERIC_MAP.items():
            val = env.get(env_key)
            if val is not None and field_name not in overrides:
                config_kwargs[field_name] = _env_number(env_key, val, cast)

        if "stream_enabled" not in overrides:
            config_kwargs["stream_enabled"] = _env_bool(env.get("GEO_STREAM_ENABLED"), True)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)

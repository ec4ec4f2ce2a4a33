"""Custom exception hierarchy for pygeoengine."""

from __future__ import annotations


class GeoError(Exception):
    """Base exception for all pygeoengine errors."""


class GeoConfigError(GeoError):
    """Invalid or missing configuration."""


class GeoValidationError(GeoError):
    """A command was rejected because it would break a geometry invariant.

    Raised for vertex-count violations, blank zone names and edit commands
    issued in the wrong edit mode.  State is never changed when this is
    raised.
    """


class GeoTransportError(GeoError):
    """HTTP or websocket failure (network, non-2xx, invalid JSON)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)


class GeoDecodeError(GeoError):
    """Malformed stream message or stored geometry.

    Callers on the ingestion path log and drop the offending input; this
    error never terminates the stream.
    """

"""HTTP transport with API key headers and JSON decoding."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Mapping
from typing import Any, Protocol

import aiohttp

from pygeoengine._constants import API_KEY_HEADER
from pygeoengine._redact import redact_for_log
from pygeoengine.config import GeoConfig
from pygeoengine.exceptions import GeoTransportError

_logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Structural transport interface used by endpoint modules.

    Having a protocol here makes it easy to pass test doubles while
    keeping the production implementation (`HttpTransport`) concrete.
    """

    async def request_json(
        self,
        method: str,
        endpoint: str,
        *,
        params: Mapping[str, Any] | None = None,
        payload: Mapping[str, Any] | None = None,
    ) -> Any:
        ...


class HttpTransport:
    """JSON-over-HTTP transport for the geo backend."""

    def __init__(self, config: GeoConfig, http_session: aiohttp.ClientSession) -> None:
        self._config = config
        self._http = http_session
        self._timeout = aiohttp.ClientTimeout(total=config.request_timeout)

    def _headers(self) -> dict[str, str]:
        headers = {"accept": "application/json"}
        if self._config.api_key:
            headers[API_KEY_HEADER] = self._config.api_key
        return headers

    async def request_json(
        self,
        method: str,
        endpoint: str,
        *,
        params: Mapping[str, Any] | None = None,
        payload: Mapping[str, Any] | None = None,
    ) -> Any:
        """Send a request and return the decoded JSON body.

        An empty body (e.g. ``204 No Content``) decodes to ``None``.

        Raises
        ------
        GeoTransportError
            On network failure, timeout, non-2xx status or a body that is
            not JSON.
        """
        url = f"{self._config.api_url.rstrip('/')}{endpoint}"
        _logger.debug(
            "%s %s params=%s payload=%s",
            method,
            url,
            redact_for_log(params),
            redact_for_log(payload, max_string=128),
        )

        try:
            async with self._http.request(
                method,
                url,
                params=dict(params) if params is not None else None,
                json=dict(payload) if payload is not None else None,
                headers=self._headers(),
                timeout=self._timeout,
            ) as resp:
                text = await resp.text()
                if not 200 <= resp.status < 300:
                    raise GeoTransportError(
                        f"HTTP {resp.status} from {method} {endpoint}: {text[:200]}",
                        status_code=resp.status,
                        endpoint=endpoint,
                    )
        except GeoTransportError:
            raise
        except asyncio.TimeoutError as exc:
            raise GeoTransportError(
                f"{method} {endpoint} timed out after {self._config.request_timeout}s",
                endpoint=endpoint,
            ) from exc
        except aiohttp.ClientError as exc:
            raise GeoTransportError(
                f"{method} {endpoint} failed: {exc}",
                endpoint=endpoint,
            ) from exc

        if not text.strip():
            return None

        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise GeoTransportError(
                f"Invalid JSON from {method} {endpoint}: {text[:200]}",
                status_code=resp.status,
                endpoint=endpoint,
            ) from exc

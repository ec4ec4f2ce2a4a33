"""Internal push stream runtime over an aiohttp websocket."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable

import aiohttp

from pygeoengine._redact import redact_url
from pygeoengine.exceptions import GeoTransportError


class StreamRuntime:
    """Websocket reader that hands every text frame to ``on_frame``.

    Frames are delivered one at a time, in arrival order, on the event
    loop that called :meth:`start`.  The connection is opened once and
    :meth:`stop` is idempotent; reconnecting is left to the caller.
    """

    def __init__(
        self,
        *,
        http_session: aiohttp.ClientSession,
        url: str,
        on_frame: Callable[[str], object],
        heartbeat: float | None = 30.0,
        logger: logging.Logger | None = None,
    ) -> None:
        self._http = http_session
        self._url = url
        self._on_frame = on_frame
        self._heartbeat = heartbeat
        self._logger = logger or logging.getLogger(__name__)
        self._ws: aiohttp.ClientWebSocketResponse | None = None
        self._reader: asyncio.Task[None] | None = None
        self._running = False

    @property
    def is_running(self) -> bool:
        """Whether the reader is connected and consuming frames."""
        return self._running

    async def start(self) -> None:
        """Open the websocket and start the reader task.

        Raises
        ------
        GeoTransportError
            If the websocket handshake fails.
        """
        await self.stop()
        self._logger.debug("Stream connect requested url=%s", redact_url(self._url))
        try:
            ws = await self._http.ws_connect(self._url, heartbeat=self._heartbeat)
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise GeoTransportError(f"Stream connect failed: {exc}", endpoint=redact_url(self._url)) from exc

        self._ws = ws
        self._running = True
        self._reader = asyncio.create_task(self._read(ws), name="pygeoengine-stream-reader")
        self._logger.debug("Stream connected")

    async def _read(self, ws: aiohttp.ClientWebSocketResponse) -> None:
        try:
            async for msg in ws:
                if msg.type == aiohttp.WSMsgType.TEXT:
                    self._deliver(msg.data)
                elif msg.type == aiohttp.WSMsgType.BINARY:
                    self._deliver(msg.data.decode("utf-8", errors="replace"))
                elif msg.type == aiohttp.WSMsgType.ERROR:
                    self._logger.warning("Stream error: %s", ws.exception())
                    break
        finally:
            self._running = False
            self._logger.debug("Stream reader finished close_code=%s", ws.close_code)

    def _deliver(self, frame: str) -> None:
        try:
            self._on_frame(frame)
        except Exception:
            self._logger.warning("Stream frame handler failed", exc_info=True)

    async def stop(self) -> None:
        """Close the websocket and stop the reader.  Safe to call repeatedly."""
        ws = self._ws
        reader = self._reader
        self._ws = None
        self._reader = None
        self._running = False

        if ws is not None and not ws.closed:
            self._logger.debug("Stream close requested")
            await ws.close()
        if reader is not None and not reader.done():
            reader.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await reader

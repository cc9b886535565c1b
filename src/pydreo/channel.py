"""Message channel shared by all fans on one Dreo cloud socket.

Bridges only depend on :class:`MessageChannel`.  :class:`WebSocketChannel`
adapts an already-open aiohttp WebSocket to it; opening, authenticating
and reconnecting the socket is the caller's job.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any, Protocol

import aiohttp

from pydreo._redact import redact_for_log, redact_url
from pydreo.config import DreoConfig
from pydreo.exceptions import DreoChannelError

_logger = logging.getLogger(__name__)

MessageCallback = Callable[[str], Any]
Unsubscribe = Callable[[], None]


class MessageChannel(Protocol):
    """Bidirectional text channel.

    ``send`` returns once the frame is handed to the transport and raises
    :class:`pydreo.exceptions.DreoChannelError` when it cannot be.
    ``on_message`` registers a callback invoked once per inbound frame, in
    arrival order, and returns a function that removes it.
    """

    async def send(self, text: str) -> None: ...

    def on_message(self, callback: MessageCallback) -> Unsubscribe: ...


class WebSocketChannel:
    """:class:`MessageChannel` over an ``aiohttp`` client WebSocket.

    Usage::

        async with aiohttp.ClientSession() as session:
            channel = await WebSocketChannel.connect(session, config)
            bridge = FanBridge.from_api(device, state, channel)
            await channel.run()
    """

    def __init__(
        self,
        ws: aiohttp.ClientWebSocketResponse,
        *,
        trace_frames: bool = False,
        logger: logging.Logger | None = None,
    ) -> None:
        self._ws = ws
        self._trace_frames = trace_frames
        self._logger = logger or _logger
        self._subscribers: list[MessageCallback] = []

    @classmethod
    async def connect(cls, session: aiohttp.ClientSession, config: DreoConfig) -> WebSocketChannel:
        """Open the cloud socket described by *config*."""
        url = config.socket_url()
        _logger.debug("Opening WebSocket %s", redact_url(url))
        try:
            ws = await session.ws_connect(url, heartbeat=config.ws_heartbeat)
        except aiohttp.ClientError as exc:
            raise DreoChannelError(f"WebSocket connect failed: {exc}") from exc
        return cls(ws, trace_frames=config.trace_frames)

    @property
    def closed(self) -> bool:
        return self._ws.closed

    def on_message(self, callback: MessageCallback) -> Unsubscribe:
        self._subscribers.append(callback)

        def _unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return _unsubscribe

    async def send(self, text: str) -> None:
        if self._ws.closed:
            raise DreoChannelError("WebSocket is closed")
        if self._trace_frames:
            self._logger.debug("WS send %s", redact_for_log(text))
        try:
            await self._ws.send_str(text)
        except (aiohttp.ClientError, ConnectionError, RuntimeError) as exc:
            raise DreoChannelError(f"WebSocket send failed: {exc}") from exc

    def dispatch(self, text: str) -> None:
        """Deliver one frame to every subscriber.

        A failing subscriber is logged and skipped; the others and later
        frames are unaffected.
        """
        if self._trace_frames:
            self._logger.debug("WS recv %s", redact_for_log(text))
        for callback in list(self._subscribers):
            try:
                callback(text)
            except Exception:
                self._logger.warning("WebSocket message handler failed", exc_info=True)

    async def run(self) -> None:
        """Read frames until the socket closes."""
        async for msg in self._ws:
            if msg.type == aiohttp.WSMsgType.TEXT:
                self.dispatch(msg.data)
            elif msg.type == aiohttp.WSMsgType.BINARY:
                self.dispatch(msg.data.decode("utf-8", errors="replace"))
            elif msg.type == aiohttp.WSMsgType.ERROR:
                self._logger.warning("WebSocket error: %s", self._ws.exception())
                break
        self._logger.debug("WebSocket reader stopped")

    async def close(self) -> None:
        try:
            await asyncio.wait_for(self._ws.close(), timeout=5.0)
        except TimeoutError:
            self._logger.debug("WebSocket close timed out")

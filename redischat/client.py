"""A WebSocket client with a bounded outgoing queue."""

from __future__ import annotations

import asyncio
from typing import Any, Callable

from aiohttp import WSCloseCode, WSMsgType

from .interfaces import Logger

_SEND_BUFFER = 256
_EXPECTED_CLOSE_CODES = frozenset({WSCloseCode.GOING_AWAY, WSCloseCode.ABNORMAL_CLOSURE})
_CLOSED = object()


class WebSocketClient:
    """One connected WebSocket peer.

    Outgoing messages are queued by :meth:`send` and written by
    :meth:`write_pump`; a client whose queue is full is closed.
    """

    def __init__(self, conn: Any, logger: Logger) -> None:
        self._conn = conn
        self._logger = logger
        self._queue: asyncio.Queue[Any] = asyncio.Queue()
        self._closed = False
        self._close_task: asyncio.Task[Any] | None = None

    def send(self, message: bytes) -> None:
        """Queue ``message``; close the client if its queue is full."""
        if self._closed:
            return
        if self._queue.qsize() >= _SEND_BUFFER:
            self.close()
            return
        self._queue.put_nowait(message)

    async def read_pump(self, on_message: Callable[[bytes], None]) -> int | None:
        """Pass each incoming message to ``on_message`` until the connection ends.

        Returns the close code sent by the peer, or None if the connection
        ended without one.
        """
        while True:
            msg = await self._conn.receive()
            if msg.type is WSMsgType.TEXT:
                on_message(msg.data.encode("utf-8"))
            elif msg.type is WSMsgType.BINARY:
                on_message(bytes(msg.data))
            elif msg.type in (WSMsgType.PING, WSMsgType.PONG):
                continue
            else:
                return self._disconnected(msg)

    def _disconnected(self, msg: Any) -> int | None:
        if msg.type is WSMsgType.CLOSE:
            code = msg.data
            detail = f"websocket: close {code} {msg.extra or ''}".rstrip()
            if code in _EXPECTED_CLOSE_CODES:
                self._logger.info("Normal disconnection", error=detail)
            else:
                self._logger.error("Unexpected close", error=detail)
            return code
        detail = str(msg.data) if msg.type is WSMsgType.ERROR else msg.type.name.lower()
        self._logger.info("Normal disconnection", error=detail)
        return None

    async def write_pump(self) -> None:
        """Write queued messages as text frames until the client is closed."""
        while True:
            message = await self._queue.get()
            if message is _CLOSED:
                return
            try:
                await self._conn.send_str(message.decode("utf-8", errors="replace"))
            except (ConnectionError, RuntimeError):
                continue

    def close(self) -> None:
        """Close the connection and end the write pump; later calls do nothing."""
        if self._closed:
            return
        self._closed = True
        self._queue.put_nowait(_CLOSED)
        self._close_task = asyncio.get_running_loop().create_task(self._conn.close())


class ClientFactory:
    """Creates clients that share one logger."""

    def __init__(self, logger: Logger) -> None:
        self._logger = logger

    def create(self, conn: Any) -> WebSocketClient:
        """Wrap the WebSocket ``conn`` in a client."""
        return WebSocketClient(conn, self._logger)
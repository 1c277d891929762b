"""Runs one WebSocket connection inside a chat channel."""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Optional

from .channel_manager import ChannelManager
from .client import ClientFactory
from .interfaces import Broadcaster, Client, Logger
from .messages import RealtimeMessage

OnMessage = Callable[[bytes], Optional[RealtimeMessage]]


class Connection:
    """Registers a connection with its channel and pumps messages both ways."""

    def __init__(self, manager: ChannelManager, logger: Logger, client_factory: ClientFactory) -> None:
        self._manager = manager
        self._logger = logger
        self._client_factory = client_factory

    async def handle_connection(
        self,
        conn: Any,
        channel: str,
        on_message: OnMessage,
        on_close: Callable[[], None] | None,
    ) -> None:
        """Serve ``conn`` in ``channel`` until it disconnects.

        Each incoming message goes through ``on_message``; a frame it returns
        is broadcast to the channel. ``on_close`` runs once the client has left.
        """
        client = self._client_factory.create(conn)
        broadcaster = self._manager.get_or_create_channel(channel)
        broadcaster.register(client)

        write_task = asyncio.get_running_loop().create_task(self._handle_write(client))
        try:
            await self._handle_read(client, broadcaster, on_message, on_close)
        finally:
            await write_task

    async def _handle_write(self, client: Client) -> None:
        try:
            await client.write_pump()
        except Exception as exc:
            self._logger.error("Recovered from failure in write pump", error=str(exc))

    async def _handle_read(
        self,
        client: Client,
        broadcaster: Broadcaster,
        on_message: OnMessage,
        on_close: Callable[[], None] | None,
    ) -> None:
        def relay(raw: bytes) -> None:
            processed = on_message(raw)
            if processed is not None:
                self._manager.broadcast(processed)

        try:
            await client.read_pump(relay)
        finally:
            broadcaster.unregister(client)
            client.close()
            if on_close is not None:
                on_close()
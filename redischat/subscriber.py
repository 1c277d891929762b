"""Relays messages published on Redis channels to local clients."""

from __future__ import annotations

import asyncio

from .interfaces import ChatChannelManager, Logger, PubSub
from .messages import RealtimeMessage


class RedisSubscriber:
    """Listens on pub/sub channels and broadcasts what arrives to their clients."""

    def __init__(self, pubsub: PubSub, manager: ChatChannelManager, logger: Logger) -> None:
        self._pubsub = pubsub
        self._manager = manager
        self._logger = logger
        self._tasks: dict[str, asyncio.Task[None]] = {}

    def start(self, channel: str) -> None:
        """Begin listening on ``channel`` unless already listening."""
        if channel in self._tasks:
            return
        self._tasks[channel] = asyncio.get_running_loop().create_task(self._listen(channel))

    def stop(self) -> None:
        """Stop listening on every channel."""
        tasks = list(self._tasks.values())
        self._tasks.clear()
        for task in tasks:
            task.cancel()

    async def _listen(self, channel: str) -> None:
        try:
            subscription = await self._pubsub.subscribe(channel)
        except Exception as exc:
            self._logger.fatal("[RedisSubscriber] subscribe error", channel=channel, error=str(exc))
            return
        try:
            while True:
                try:
                    msg = await subscription.receive()
                except Exception as exc:
                    self._logger.fatal("[RedisSubscriber] receive error", channel=channel, error=str(exc))
                    break
                self._manager.broadcast(RealtimeMessage(channel=msg.channel, data=msg.payload))
        finally:
            await subscription.close()
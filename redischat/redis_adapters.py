"""Redis key/value and publish/subscribe adapters."""

from __future__ import annotations

from typing import Any

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from .config import RedisConfig
from .messages import PubSubMessage


def _text(value: Any) -> str:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8")
    return str(value)


def _bytes(value: Any) -> bytes:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    return str(value).encode("utf-8")


class RedisAdapter:
    """A key/value cache backed by a Redis client."""

    def __init__(self, client: Any) -> None:
        self._client = client

    @classmethod
    def from_config(cls, config: RedisConfig) -> RedisAdapter:
        """Create an adapter with a client for the configured server."""
        client = aioredis.Redis(
            host=config.host,
            port=config.port,
            password=config.password or None,
            db=config.db,
        )
        return cls(client)

    @property
    def client(self) -> Any:
        """The underlying Redis client."""
        return self._client

    async def set(self, key: str, value: Any) -> None:
        """Store ``value`` under ``key`` with no expiry."""
        await self._client.set(key, value)

    async def get(self, key: str) -> str:
        """Return the value of ``key``; raise KeyError if it is not set."""
        value = await self._client.get(key)
        if value is None:
            raise KeyError(key)
        return _text(value)

    async def delete(self, key: str) -> None:
        """Remove ``key``."""
        await self._client.delete(key)

    async def close(self) -> None:
        """Close the client's connections."""
        await self._client.aclose()


class RedisSubscription:
    """An open Redis subscription."""

    def __init__(self, pubsub: Any) -> None:
        self._pubsub = pubsub

    async def receive(self) -> PubSubMessage:
        """Wait for the next published message, skipping subscription notices."""
        while True:
            try:
                msg = await self._pubsub.get_message(ignore_subscribe_messages=True, timeout=None)
            except RedisError as exc:
                raise ConnectionError(f"error receiving message from Redis Pub/Sub: {exc}") from exc
            if msg is None or msg.get("type") not in ("message", "pmessage"):
                continue
            return PubSubMessage(channel=_text(msg["channel"]), payload=_bytes(msg["data"]))

    async def unsubscribe(self, *args: str) -> None:
        """Unsubscribe from the given channels, or from all if none are given."""
        await self._pubsub.unsubscribe(*args)

    async def close(self) -> None:
        """End the subscription and release its connection."""
        await self._pubsub.aclose()


class RedisPubSubAdapter:
    """Publish/subscribe over a Redis client."""

    def __init__(self, client: Any) -> None:
        self._client = client

    async def publish(self, channel: str, message: bytes) -> None:
        """Publish ``message`` on ``channel``."""
        await self._client.publish(channel, message)

    async def subscribe(self, channel: str) -> RedisSubscription:
        """Subscribe to ``channel``."""
        pubsub = self._client.pubsub()
        await pubsub.subscribe(channel)
        return RedisSubscription(pubsub)
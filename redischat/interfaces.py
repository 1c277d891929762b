"""Protocols shared between the chat server's components."""

from __future__ import annotations

from typing import Any, Callable, Protocol, runtime_checkable

from .messages import PubSubMessage, RealtimeMessage


@runtime_checkable
class Cache(Protocol):
    """A key/value store."""

    async def set(self, key: str, value: Any) -> None:
        """Store ``value`` under ``key``."""

    async def get(self, key: str) -> str:
        """Return the value stored under ``key``."""

    async def delete(self, key: str) -> None:
        """Remove ``key``."""


@runtime_checkable
class Logger(Protocol):
    """A logger taking a message and structured fields."""

    def info(self, msg: str, **kwargs: Any) -> None:
        """Log at info level."""

    def warn(self, msg: str, **kwargs: Any) -> None:
        """Log at warning level."""

    def error(self, msg: str, **kwargs: Any) -> None:
        """Log at error level."""

    def debug(self, msg: str, **kwargs: Any) -> None:
        """Log at debug level."""

    def fatal(self, msg: str, **kwargs: Any) -> None:
        """Log at fatal level and stop the process."""


@runtime_checkable
class Subscription(Protocol):
    """An open subscription to a pub/sub channel."""

    async def receive(self) -> PubSubMessage:
        """Wait for the next message."""

    async def close(self) -> None:
        """End the subscription."""


@runtime_checkable
class PubSub(Protocol):
    """A publish/subscribe transport."""

    async def publish(self, channel: str, message: bytes) -> None:
        """Publish ``message`` on ``channel``."""

    async def subscribe(self, channel: str) -> Subscription:
        """Open a subscription to ``channel``."""


@runtime_checkable
class Client(Protocol):
    """A connected realtime client."""

    def send(self, message: bytes) -> None:
        """Queue ``message`` for delivery."""

    async def read_pump(self, on_message: Callable[[bytes], None]) -> None:
        """Read messages until the connection ends, passing each to ``on_message``."""

    async def write_pump(self) -> None:
        """Write queued messages until the client is closed."""

    def close(self) -> None:
        """Close the connection and stop delivery."""


@runtime_checkable
class Broadcaster(Protocol):
    """Fans messages out to the clients of one channel."""

    def register(self, client: Client) -> None:
        """Add ``client``."""

    def unregister(self, client: Client) -> None:
        """Remove and close ``client``."""

    def broadcast(self, message: bytes) -> None:
        """Send ``message`` to every client."""

    def close_all_clients(self) -> None:
        """Close and remove every client."""


@runtime_checkable
class ChatChannelManager(Protocol):
    """Keeps one broadcaster per channel."""

    def get_or_create_channel(self, channel: str) -> Broadcaster:
        """Return the broadcaster for ``channel``, creating it if needed."""

    def broadcast(self, msg: RealtimeMessage) -> None:
        """Deliver ``msg`` to the clients of its channel."""


@runtime_checkable
class ChannelEventSubscriber(Protocol):
    """Relays external channel events to local clients."""

    def start(self, channel: str) -> None:
        """Begin listening on ``channel``."""

    def stop(self) -> None:
        """Stop listening on every channel."""
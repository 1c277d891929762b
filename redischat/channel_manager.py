"""Registry of channels and their broadcasters."""

from __future__ import annotations

from typing import Callable

from .broadcaster import ChannelBroadcaster
from .interfaces import Broadcaster
from .messages import RealtimeMessage


class ChannelManager:
    """Keeps one broadcaster per channel name."""

    def __init__(self, broadcaster_factory: Callable[[], Broadcaster] = ChannelBroadcaster) -> None:
        self._factory = broadcaster_factory
        self._channels: dict[str, Broadcaster] = {}

    def get_or_create_channel(self, channel: str) -> Broadcaster:
        """Return the broadcaster of ``channel``, creating it on first use."""
        broadcaster = self._channels.get(channel)
        if broadcaster is None:
            broadcaster = self._factory()
            self._channels[channel] = broadcaster
        return broadcaster

    def broadcast(self, msg: RealtimeMessage) -> None:
        """Send ``msg`` as JSON to every client of its channel."""
        self.get_or_create_channel(msg.channel).broadcast(msg.to_json())

    def close_channel(self, channel: str) -> None:
        """Close every client of ``channel`` and forget it."""
        broadcaster = self._channels.pop(channel, None)
        if broadcaster is not None:
            broadcaster.close_all_clients()

    def close_all_channels(self) -> None:
        """Close every client of every channel and forget all channels."""
        channels = list(self._channels.values())
        self._channels.clear()
        for broadcaster in channels:
            broadcaster.close_all_clients()

    def __contains__(self, channel: object) -> bool:
        return channel in self._channels

    def __len__(self) -> int:
        return len(self._channels)
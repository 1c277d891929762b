"""Chat use cases: rooms, incoming messages and system announcements."""

from __future__ import annotations

import json
from typing import Any

from .errors import InvalidMessageError
from .interfaces import ChannelEventSubscriber, ChatChannelManager
from .messages import ChatMessage, new_message
from .presenter import MessagePresenter

SYSTEM_SENDER = "System"
_CONTENT_KEY = "message"


def _reject_constant(name: str) -> Any:
    raise ValueError(f"invalid JSON constant: {name}")


def _extract_content(raw: bytes | str) -> str:
    try:
        payload = json.loads(raw, parse_constant=_reject_constant)
    except ValueError as exc:
        raise InvalidMessageError() from exc
    if payload is None:
        return ""
    if not isinstance(payload, dict):
        raise InvalidMessageError()
    content = ""
    # Keys match case-insensitively and the last matching key wins.
    for key, value in payload.items():
        if key.casefold() != _CONTENT_KEY:
            continue
        if value is None:
            continue
        if not isinstance(value, str):
            raise InvalidMessageError()
        content = value
    return content


class ChatService:
    """Creates rooms, parses client messages and announces joins and leaves."""

    def __init__(
        self,
        channel_manager: ChatChannelManager,
        redis_sub: ChannelEventSubscriber,
        presenter: MessagePresenter,
    ) -> None:
        self._channel_manager = channel_manager
        self._redis_sub = redis_sub
        self._presenter = presenter

    def create_room(self, room_name: str) -> None:
        """Make sure the room exists and relay its published messages."""
        self._channel_manager.get_or_create_channel(room_name)
        self._redis_sub.start(room_name)

    def process_incoming(self, raw: bytes | str, sender: str, channel: str) -> ChatMessage:
        """Parse a client's ``{"message": ...}`` payload into a chat message.

        Raises InvalidMessageError if the payload is malformed or the content blank.
        """
        return new_message(sender, channel, _extract_content(raw))

    def broadcast_system_message(self, channel: str, nickname: str, action: str) -> None:
        """Announce to ``channel`` that ``nickname`` performed ``action``."""
        self._create_and_broadcast(SYSTEM_SENDER, channel, f"{nickname} {action} the chat.")

    def _create_and_broadcast(self, sender: str, channel: str, content: str) -> None:
        msg = new_message(sender, channel, content)
        formatted = self._presenter.format(msg)
        if formatted is not None:
            self._channel_manager.broadcast(formatted)
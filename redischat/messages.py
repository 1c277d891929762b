"""Chat messages, realtime frames, pub/sub messages and request bodies."""

from __future__ import annotations

import base64
import binascii
import json
from dataclasses import dataclass
from typing import Any, Mapping

from .errors import InvalidMessageError, InvalidRequestBodyError

_HTML_ESCAPES = (
    ("<", "\\u003c"),
    (">", "\\u003e"),
    ("&", "\\u0026"),
    ("\u2028", "\\u2028"),
    ("\u2029", "\\u2029"),
)


def _marshal(obj: Any) -> bytes:
    text = json.dumps(obj, ensure_ascii=False, separators=(",", ":"))
    for char, escaped in _HTML_ESCAPES:
        text = text.replace(char, escaped)
    return text.encode("utf-8")


@dataclass(frozen=True)
class ChatMessage:
    """A chat message sent by a user to a channel."""

    sender: str
    channel: str
    content: str


def new_message(sender: str, channel: str, content: str) -> ChatMessage:
    """Create a chat message; the content must not be blank."""
    if not content.strip():
        raise InvalidMessageError("message content cannot be empty")
    return ChatMessage(sender=sender, channel=channel, content=content)


@dataclass(frozen=True)
class RealtimeMessage:
    """A frame delivered to every client of a channel."""

    channel: str
    data: bytes

    def to_json(self) -> bytes:
        """Encode as JSON, with the data base64-encoded."""
        return _marshal(
            {
                "channel": self.channel,
                "data": base64.b64encode(self.data).decode("ascii"),
            }
        )

    @classmethod
    def from_json(cls, raw: bytes | str) -> RealtimeMessage:
        """Decode a frame produced by :meth:`to_json`."""
        try:
            obj = json.loads(raw)
        except ValueError as exc:
            raise InvalidMessageError() from exc
        if not isinstance(obj, dict):
            raise InvalidMessageError()
        channel = obj.get("channel")
        if channel is None:
            channel = ""
        if not isinstance(channel, str):
            raise InvalidMessageError()
        data = obj.get("data")
        if data is None:
            return cls(channel=channel, data=b"")
        if not isinstance(data, str):
            raise InvalidMessageError()
        try:
            decoded = base64.b64decode(data, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise InvalidMessageError() from exc
        return cls(channel=channel, data=decoded)


@dataclass(frozen=True)
class PubSubMessage:
    """A message received from a pub/sub channel."""

    channel: str
    payload: bytes


@dataclass(frozen=True)
class CreateRoomRequest:
    """Request body for creating a chat room."""

    room_name: str
    password: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> CreateRoomRequest:
        room_name = data.get("room_name")
        if not isinstance(room_name, str) or not room_name:
            raise InvalidRequestBodyError()
        secret = data.get("password")
        if secret is None:
            secret = ""
        if not isinstance(secret, str):
            raise InvalidRequestBodyError()
        return cls(room_name=room_name, password=secret)


@dataclass(frozen=True)
class CreateRoomResponse:
    """Response body for a created chat room."""

    room_id: str

    def to_dict(self) -> dict[str, str]:
        return {"room_id": self.room_id}
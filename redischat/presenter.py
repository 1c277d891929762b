"""Turns chat messages into realtime frames."""

from __future__ import annotations

import json

from .interfaces import Logger
from .messages import ChatMessage, RealtimeMessage

_HTML_ESCAPES = (
    ("<", "\\u003c"),
    (">", "\\u003e"),
    ("&", "\\u0026"),
    ("\u2028", "\\u2028"),
    ("\u2029", "\\u2029"),
)


def _marshal_sorted(obj: dict[str, str]) -> bytes:
    text = json.dumps(obj, ensure_ascii=False, separators=(",", ":"), sort_keys=True)
    for char, escaped in _HTML_ESCAPES:
        text = text.replace(char, escaped)
    return text.encode("utf-8")


class MessagePresenter:
    """Formats chat messages as the JSON payload clients receive."""

    def __init__(self, logger: Logger) -> None:
        self._logger = logger

    def format(self, msg: ChatMessage) -> RealtimeMessage | None:
        """Return the frame for ``msg``, or None if it cannot be encoded."""
        try:
            data = _marshal_sorted({"sender": msg.sender, "message": msg.content})
        except (UnicodeEncodeError, ValueError) as exc:
            self._logger.warn("failed to marshal message JSON", err=str(exc))
            return None
        return RealtimeMessage(channel=msg.channel, data=data)
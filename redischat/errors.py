"""Error codes, exceptions and the JSON error body sent to HTTP clients."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum


class ErrorCode(IntEnum):
    """Numeric codes returned in HTTP error responses."""

    INVALID_REQUEST_BODY = 10001
    WEBSOCKET_UPGRADE_FAILED = 10002
    CHANNEL_CREATION_FAILED = 10003


class ChatServerError(Exception):
    """Base class for errors raised by the chat server."""

    code: ErrorCode | None = None
    default_message = "chat server error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)


class InvalidRequestBodyError(ChatServerError):
    """The request is missing a required parameter or is malformed."""

    code = ErrorCode.INVALID_REQUEST_BODY
    default_message = "invalid request body"


class WebSocketUpgradeFailedError(ChatServerError):
    """The HTTP connection could not be upgraded to a WebSocket."""

    code = ErrorCode.WEBSOCKET_UPGRADE_FAILED
    default_message = "websocket upgrade failed"


class ChannelCreationFailedError(ChatServerError):
    """A chat channel could not be created."""

    code = ErrorCode.CHANNEL_CREATION_FAILED
    default_message = "create channel failed"


class InvalidMessageError(ChatServerError, ValueError):
    """A chat message could not be parsed or has no content."""

    default_message = "invalid message format"


@dataclass(frozen=True)
class ErrorResponse:
    """The JSON body of an HTTP error response."""

    code: ErrorCode

    def to_dict(self) -> dict[str, int]:
        return {"code": int(self.code)}
"""HTTP routes: joining a chat channel over a WebSocket."""

from __future__ import annotations

from aiohttp import web

from .chat_service import SYSTEM_SENDER, ChatService
from .connection import Connection
from .errors import ChatServerError, ErrorCode, ErrorResponse
from .interfaces import ChatChannelManager, Logger
from .messages import RealtimeMessage
from .presenter import MessagePresenter


def _error_response(status: int, code: ErrorCode) -> web.Response:
    return web.json_response(ErrorResponse(code).to_dict(), status=status)


class ChatHandler:
    """Handles requests to join a chat channel."""

    def __init__(
        self,
        manager: ChatChannelManager,
        connection: Connection,
        chat_service: ChatService,
        presenter: MessagePresenter,
        logger: Logger,
    ) -> None:
        self._manager = manager
        self._connection = connection
        self._chat_service = chat_service
        self._presenter = presenter
        self._logger = logger

    async def join_channel(self, request: web.Request) -> web.StreamResponse:
        """Upgrade to a WebSocket and serve the caller in the requested channel."""
        channel = request.query.get("channel", "")
        if not channel:
            return _error_response(400, ErrorCode.INVALID_REQUEST_BODY)

        ws = web.WebSocketResponse()
        if not ws.can_prepare(request).ok:
            return _error_response(500, ErrorCode.WEBSOCKET_UPGRADE_FAILED)
        try:
            await ws.prepare(request)
        except web.HTTPException:
            return _error_response(500, ErrorCode.WEBSOCKET_UPGRADE_FAILED)

        try:
            self._chat_service.create_room(channel)
        except ChatServerError as exc:
            self._logger.warn("failed to create channel", err=str(exc))
            await ws.close()
            return ws

        nickname = request.query.get("nickname", "")
        if not nickname or nickname == SYSTEM_SENDER:
            await ws.close()
            return ws

        try:
            self._chat_service.broadcast_system_message(channel, nickname, "joined")
        except ChatServerError as exc:
            self._logger.warn("failed to announce join", err=str(exc))

        def on_message(raw: bytes) -> RealtimeMessage | None:
            try:
                message = self._chat_service.process_incoming(raw, nickname, channel)
            except ChatServerError as exc:
                self._logger.warn("failed to parse message", err=str(exc))
                return None
            return self._presenter.format(message)

        def on_close() -> None:
            try:
                self._chat_service.broadcast_system_message(channel, nickname, "left")
            except ChatServerError as exc:
                self._logger.warn("failed to announce leave", err=str(exc))

        await self._connection.handle_connection(ws, channel, on_message, on_close)
        return ws


def create_app(
    manager: ChatChannelManager,
    connection: Connection,
    chat_service: ChatService,
    presenter: MessagePresenter,
    logger: Logger,
) -> web.Application:
    """Build the web application with the chat routes."""
    app = web.Application()
    handler = ChatHandler(manager, connection, chat_service, presenter, logger)
    app.router.add_get("/chat/join", handler.join_channel)
    return app
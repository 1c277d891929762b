"""Wiring of the chat server's components and the command that runs it."""

from __future__ import annotations

import argparse
import asyncio
import signal
import sys
from dataclasses import dataclass
from typing import Any

from aiohttp import web
from redis.exceptions import RedisError

from .channel_manager import ChannelManager
from .chat_service import ChatService
from .client import ClientFactory
from .config import AppConfig, load_env_config, load_redis_config
from .connection import Connection
from .interfaces import Logger
from .logger import StructuredLogger, create_logger
from .presenter import MessagePresenter
from .redis_adapters import RedisAdapter, RedisPubSubAdapter
from .subscriber import RedisSubscriber
from .web import create_app

_SHUTDOWN_TIMEOUT = 5.0


class _LoggerInitError(Exception):
    """The logger could not be created."""


@dataclass
class AppDependencies:
    """Every long-lived component of a running server."""

    redis_client: Any
    redis_cache: RedisAdapter
    redis_pubsub: RedisPubSubAdapter
    channel_manager: ChannelManager
    subscriber: RedisSubscriber
    connection: Connection
    chat_service: ChatService
    presenter: MessagePresenter
    logger: Logger


def initialize(config: AppConfig, logger: Logger) -> AppDependencies:
    """Create and connect the server's components; Redis settings come from the environment."""
    redis_config = load_redis_config()
    try:
        redis_cache = RedisAdapter.from_config(redis_config)
    except (RedisError, ValueError) as exc:
        raise RuntimeError(f"redis adapter init failed: {exc}") from exc

    client = redis_cache.client
    pubsub = RedisPubSubAdapter(client)
    manager = ChannelManager()
    subscriber = RedisSubscriber(pubsub, manager, logger)
    connection = Connection(manager, logger, ClientFactory(logger))
    presenter = MessagePresenter(logger)
    chat_service = ChatService(manager, subscriber, presenter)

    return AppDependencies(
        redis_client=client,
        redis_cache=redis_cache,
        redis_pubsub=pubsub,
        channel_manager=manager,
        subscriber=subscriber,
        connection=connection,
        chat_service=chat_service,
        presenter=presenter,
        logger=logger,
    )


async def shutdown_resources(deps: AppDependencies) -> None:
    """Stop relaying, close every client and close the Redis connection."""
    deps.subscriber.stop()
    deps.channel_manager.close_all_channels()
    try:
        await deps.redis_cache.close()
    except (RedisError, OSError, RuntimeError) as exc:
        deps.logger.error("failed to close Redis", error=str(exc))


def _install_signal_handlers(stop: asyncio.Event) -> None:
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop.set)
        except (NotImplementedError, RuntimeError):
            pass


async def serve(config: AppConfig) -> None:
    """Run the server until SIGINT or SIGTERM, then shut it down gracefully."""
    try:
        logger: StructuredLogger = create_logger(config)
    except OSError as exc:
        raise _LoggerInitError(str(exc)) from exc

    try:
        deps = initialize(config, logger)
    except RuntimeError as exc:
        logger.fatal("[main] failed to initialize", error=str(exc))
        return

    app = create_app(deps.channel_manager, deps.connection, deps.chat_service, deps.presenter, logger)

    async def _close_channels(_app: web.Application) -> None:
        deps.channel_manager.close_all_channels()

    app.on_shutdown.append(_close_channels)

    runner = web.AppRunner(app)
    await runner.setup()
    logger.info("[main] starting server...", port=config.port, debug=config.is_debug)
    try:
        site = web.TCPSite(runner, "0.0.0.0", int(config.port))
        await site.start()
    except (OSError, ValueError) as exc:
        await runner.cleanup()
        await shutdown_resources(deps)
        logger.fatal("[main] failed to run server", error=str(exc))
        return

    stop = asyncio.Event()
    _install_signal_handlers(stop)
    try:
        await stop.wait()
    finally:
        logger.info("[main] shutting down server...")
        try:
            await asyncio.wait_for(runner.cleanup(), _SHUTDOWN_TIMEOUT)
        except asyncio.TimeoutError:
            logger.error("[main] server forced to shutdown", error="shutdown timed out")
        await shutdown_resources(deps)
        logger.info("[main] server gracefully stopped")


def main(argv: list[str] | None = None) -> int:
    """Run the chat server configured from the environment."""
    parser = argparse.ArgumentParser(
        prog="redischat",
        description="WebSocket chat server relaying messages through Redis. "
        "Configured by PORT, APP_DEBUG, LOG_TO_FILE, LOG_FILE_PATH, LOG_ERROR_PATH "
        "and REDIS_HOST, REDIS_PORT, REDIS_PASSWORD, REDIS_DB.",
    )
    parser.parse_args(argv)
    config = load_env_config()
    try:
        asyncio.run(serve(config))
    except _LoggerInitError as exc:
        print(f"failed to init logger: {exc}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        return 0
    return 0


if __name__ == "__main__":
    sys.exit(main())
import pytest

from redischat.app import AppDependencies, initialize, main, shutdown_resources
from redischat.channel_manager import ChannelManager
from redischat.chat_service import ChatService
from redischat.client import ClientFactory
from redischat.config import AppConfig
from redischat.connection import Connection
from redischat.presenter import MessagePresenter


class RecordingLogger:
    def __init__(self):
        self.records = []

    def _add(self, level, msg, kwargs):
        self.records.append((level, msg, kwargs))

    def info(self, msg, **kwargs):
        self._add("info", msg, kwargs)

    def warn(self, msg, **kwargs):
        self._add("warn", msg, kwargs)

    def error(self, msg, **kwargs):
        self._add("error", msg, kwargs)

    def debug(self, msg, **kwargs):
        self._add("debug", msg, kwargs)

    def fatal(self, msg, **kwargs):
        self._add("fatal", msg, kwargs)


class RecordingSubscriber:
    def __init__(self):
        self.stopped = 0

    def start(self, channel):
        pass

    def stop(self):
        self.stopped += 1


class FailingCache:
    async def close(self):
        raise ConnectionError("connection reset")


def make_deps(logger, subscriber, cache):
    manager = ChannelManager()
    presenter = MessagePresenter(logger)
    return AppDependencies(
        redis_client=None,
        redis_cache=cache,
        redis_pubsub=None,
        channel_manager=manager,
        subscriber=subscriber,
        connection=Connection(manager, logger, ClientFactory(logger)),
        chat_service=ChatService(manager, subscriber, presenter),
        presenter=presenter,
        logger=logger,
    )


@pytest.mark.asyncio
async def test_initialize_uses_redis_settings_from_environment(monkeypatch):
    monkeypatch.setenv("REDIS_HOST", "redis.example.com")
    monkeypatch.setenv("REDIS_PORT", "6390")
    monkeypatch.setenv("REDIS_DB", "2")
    deps = initialize(AppConfig(), RecordingLogger())
    try:
        kwargs = deps.redis_client.connection_pool.connection_kwargs
        assert kwargs["host"] == "redis.example.com"
        assert kwargs["port"] == 6390
        assert kwargs["db"] == 2
        assert deps.redis_cache.client is deps.redis_client
    finally:
        await shutdown_resources(deps)


@pytest.mark.asyncio
async def test_initialize_shares_channel_manager_with_chat_service(monkeypatch):
    monkeypatch.delenv("REDIS_HOST", raising=False)
    deps = initialize(AppConfig(), RecordingLogger())
    try:
        deps.chat_service.broadcast_system_message("room", "alice", "joined")
        assert "room" in deps.channel_manager
    finally:
        await shutdown_resources(deps)


@pytest.mark.asyncio
async def test_shutdown_resources_closes_all_channels():
    deps = initialize(AppConfig(), RecordingLogger())
    deps.channel_manager.get_or_create_channel("room")
    deps.channel_manager.get_or_create_channel("lobby")
    assert len(deps.channel_manager) == 2
    await shutdown_resources(deps)
    assert len(deps.channel_manager) == 0


@pytest.mark.asyncio
async def test_shutdown_resources_logs_failed_redis_close():
    logger = RecordingLogger()
    subscriber = RecordingSubscriber()
    deps = make_deps(logger, subscriber, FailingCache())
    deps.channel_manager.get_or_create_channel("room")
    await shutdown_resources(deps)
    assert subscriber.stopped == 1
    assert len(deps.channel_manager) == 0
    errors = [(msg, kwargs) for level, msg, kwargs in logger.records if level == "error"]
    assert errors == [("failed to close Redis", {"error": "connection reset"})]


def test_main_rejects_unknown_arguments():
    with pytest.raises(SystemExit) as excinfo:
        main(["--bogus"])
    assert excinfo.value.code == 2


def test_main_fails_when_logger_cannot_be_created(monkeypatch, tmp_path, capsys):
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory")
    monkeypatch.setenv("LOG_TO_FILE", "true")
    monkeypatch.setenv("APP_DEBUG", "false")
    monkeypatch.setenv("LOG_FILE_PATH", str(blocker / "app.log"))
    monkeypatch.setenv("LOG_ERROR_PATH", str(blocker / "app.log"))
    assert main([]) == 1
    assert "failed to init logger" in capsys.readouterr().err
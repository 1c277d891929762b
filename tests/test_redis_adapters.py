import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from redischat.config import RedisConfig
from redischat.messages import PubSubMessage
from redischat.redis_adapters import RedisAdapter, RedisPubSubAdapter, RedisSubscription


class FakePubSub:
    def __init__(self, messages=(), error=None):
        self.messages = list(messages)
        self.error = error
        self.subscribed = []
        self.unsubscribed = None
        self.closed = False

    async def subscribe(self, *channels):
        self.subscribed.extend(channels)

    async def get_message(self, ignore_subscribe_messages=False, timeout=0.0):
        if self.error is not None:
            raise self.error
        return self.messages.pop(0)

    async def unsubscribe(self, *channels):
        self.unsubscribed = channels

    async def aclose(self):
        self.closed = True


class FakeRedis:
    def __init__(self):
        self.store = {}
        self.published = []
        self.pubsubs = []
        self.closed = False

    async def set(self, key, value):
        self.store[key] = value if isinstance(value, bytes) else str(value).encode()

    async def get(self, key):
        return self.store.get(key)

    async def delete(self, key):
        self.store.pop(key, None)

    async def publish(self, channel, message):
        self.published.append((channel, message))

    def pubsub(self):
        ps = FakePubSub()
        self.pubsubs.append(ps)
        return ps

    async def aclose(self):
        self.closed = True


@pytest.mark.asyncio
async def test_from_config_uses_settings():
    adapter = RedisAdapter.from_config(RedisConfig(host="cache.example.com", port=6380, db=2))
    kwargs = adapter.client.connection_pool.connection_kwargs
    assert kwargs["host"] == "cache.example.com"
    assert kwargs["port"] == 6380
    assert kwargs["db"] == 2
    assert kwargs["password"] is None
    await adapter.close()


@pytest.mark.asyncio
async def test_from_config_passes_password():
    password = "password"
    adapter = RedisAdapter.from_config(RedisConfig(password=password))
    assert adapter.client.connection_pool.connection_kwargs["password"] == password
    await adapter.close()


@pytest.mark.asyncio
async def test_set_get_round_trip():
    adapter = RedisAdapter(FakeRedis())
    await adapter.set("k", "value")
    assert await adapter.get("k") == "value"


@pytest.mark.asyncio
async def test_get_missing_raises_key_error():
    adapter = RedisAdapter(FakeRedis())
    with pytest.raises(KeyError):
        await adapter.get("missing")


@pytest.mark.asyncio
async def test_delete_removes_key():
    adapter = RedisAdapter(FakeRedis())
    await adapter.set("k", "v")
    await adapter.delete("k")
    with pytest.raises(KeyError):
        await adapter.get("k")


@pytest.mark.asyncio
async def test_close_closes_client():
    client = FakeRedis()
    await RedisAdapter(client).close()
    assert client.closed is True


@pytest.mark.asyncio
async def test_publish_forwards_to_client():
    client = FakeRedis()
    await RedisPubSubAdapter(client).publish("room", b"data")
    assert client.published == [("room", b"data")]


@pytest.mark.asyncio
async def test_subscribe_then_receive_skips_notices():
    client = FakeRedis()
    subscription = await RedisPubSubAdapter(client).subscribe("room")
    ps = client.pubsubs[0]
    ps.messages = [
        None,
        {"type": "subscribe", "channel": b"room", "data": 1},
        {"type": "message", "channel": b"room", "data": b"hi"},
    ]
    assert ps.subscribed == ["room"]
    assert await subscription.receive() == PubSubMessage(channel="room", payload=b"hi")


@pytest.mark.asyncio
async def test_receive_accepts_decoded_strings():
    ps = FakePubSub([{"type": "message", "channel": "room", "data": "text"}])
    msg = await RedisSubscription(ps).receive()
    assert msg == PubSubMessage(channel="room", payload=b"text")


@pytest.mark.asyncio
async def test_receive_wraps_redis_errors():
    ps = FakePubSub(error=RedisConnectionError("down"))
    with pytest.raises(ConnectionError, match="error receiving message from Redis Pub/Sub"):
        await RedisSubscription(ps).receive()


@pytest.mark.asyncio
async def test_unsubscribe_and_close():
    ps = FakePubSub()
    subscription = RedisSubscription(ps)
    await subscription.unsubscribe("a", "b")
    await subscription.close()
    assert ps.unsubscribed == ("a", "b")
    assert ps.closed is True
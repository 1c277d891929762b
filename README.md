# redischat

A small WebSocket chat server built on aiohttp. Clients join a named
channel over a WebSocket. Each message a client sends goes out to every
client connected to the same channel on this server. When a channel is
first joined, the server also subscribes to the Redis Pub/Sub channel
of the same name. Whatever is published there is passed on to the
connected clients.

## Installing

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Running the server

```
redischat
```

`redischat --help` shows a short description. The command takes no
other options. The same entry point is `redischat.app.main`.

The server listens on `0.0.0.0` at the configured port and runs until it
gets SIGINT or SIGTERM. It then shuts down in this order:

1. The HTTP server stops, waiting up to 5 seconds.
2. The Redis subscriptions are cancelled.
3. Every channel and its clients are closed.
4. The Redis connection is closed.

If the log files cannot be opened, the command prints
`failed to init logger: ...` and exits with status 1.

### Configuration

All settings come from environment variables. A variable that is unset
or empty takes its default.

| Variable          | Default        | Meaning                                          |
|-------------------|----------------|--------------------------------------------------|
| `PORT`            | `8080`         | HTTP port to listen on                           |
| `APP_DEBUG`       | `false`        | Also log to stdout, at debug level               |
| `LOG_TO_FILE`     | `true`         | Write JSON log lines to files                    |
| `LOG_FILE_PATH`   | `logs/app.log` | File for records below error level               |
| `LOG_ERROR_PATH`  | `logs/app.log` | File for error and fatal records                 |
| `REDIS_HOST`      | `localhost`    | Redis host                                       |
| `REDIS_PORT`      | `6379`         | Redis port                                       |
| `REDIS_PASSWORD`  | *(empty)*      | Redis password; empty means none                 |
| `REDIS_DB`        | `0`            | Redis database number                            |

Boolean values accept `1`, `t`, `T`, `true`, `True`, `TRUE` and `0`,
`f`, `F`, `false`, `False`, `FALSE`. Any other value counts as false.

An integer value that is not a plain decimal number, or that falls
outside the 64-bit range, is replaced by its default.

The directory of `LOG_FILE_PATH` is created if it does not exist.

## Joining a channel

```
GET /chat/join?channel=<name>&nickname=<nick>
```

If `channel` is missing, the server answers with HTTP 400 and this body:

```json
{"code": 10001}
```

If the request cannot be upgraded to a WebSocket, the server answers
with HTTP 500 and `{"code": 10002}`. The codes are defined in
`redischat.errors.ErrorCode`:

| Code    | Name                        |
|---------|-----------------------------|
| `10001` | `INVALID_REQUEST_BODY`      |
| `10002` | `WEBSOCKET_UPGRADE_FAILED`  |
| `10003` | `CHANNEL_CREATION_FAILED`   |

Once the upgrade succeeds, the channel is created and its Redis
subscription is started. If `nickname` is then empty or is `System`,
the WebSocket is closed straight away.

### Messages

When a client joins or leaves, the channel receives a system message
such as `alice joined the chat.` or `alice left the chat.`. Its sender
is `System`.

Clients send frames of this form:

```json
{"message": "hello"}
```

The key is matched without regard to case. A frame is dropped, and a
warning logged, in any of these cases:

- it is not valid JSON;
- its message is not a string;
- its message is blank.

Every client in the channel receives a text frame holding a JSON
envelope:

```json
{"channel":"lobby","data":"eyJtZXNzYWdlIjoiaGVsbG8iLCJzZW5kZXIiOiJhbGljZSJ9"}
```

The `data` field is base64. For chat and system messages it decodes to
`{"message":"hello","sender":"alice"}`. For a message published on Redis
it decodes to the published payload, unchanged.

A client whose outgoing queue holds 256 messages is disconnected.

## Logging

`redischat.logger.create_logger` returns a `StructuredLogger`. It has
the methods `debug`, `info`, `warn`, `error` and `fatal`, each taking a
message and keyword fields. Calling `fatal` also flushes the outputs and
raises `SystemExit(1)`.

In debug mode each record is also written to stdout as one line. The
fields of the line are separated by tabs.

When file logging is on, every record becomes one JSON object per line
(see `JsonFormatter`). Error and fatal records also carry a stack
trace.

## Using the pieces from Python

```python
from redischat.config import AppConfig
from redischat.logger import create_logger
from redischat.messages import new_message
from redischat.presenter import MessagePresenter

logger = create_logger(AppConfig(log_to_file=False))
presenter = MessagePresenter(logger)

envelope = presenter.format(new_message("alice", "lobby", "hello"))
print(envelope.to_json())
# b'{"channel":"lobby","data":"eyJtZXNzYWdlIjoiaGVsbG8iLCJzZW5kZXIiOiJhbGljZSJ9"}'
```

A blank message raises `InvalidMessageError`. `RealtimeMessage.from_json`
decodes an envelope back.

The modules:

- `redischat.config`: `AppConfig`, `RedisConfig`, `load_env_config`,
  `load_redis_config`.
- `redischat.broadcaster`: `ChannelBroadcaster`, the clients of one
  channel.
- `redischat.channel_manager`: `ChannelManager`, one broadcaster per
  channel.
- `redischat.client`: `WebSocketClient` and `ClientFactory`.
- `redischat.connection`: `Connection`, which serves one WebSocket.
- `redischat.redis_adapters`: `RedisAdapter` (set, get, delete),
  `RedisPubSubAdapter` and `RedisSubscription`.
- `redischat.subscriber`: `RedisSubscriber`, which relays Redis channels
  to clients.
- `redischat.chat_service`: `ChatService`.
- `redischat.web`: `ChatHandler` and `create_app`, which builds the
  aiohttp application.
- `redischat.app`: `initialize` builds every component as
  `AppDependencies`, `serve` runs the server, `shutdown_resources` closes
  them.
- `redischat.interfaces`: the protocols these modules share.

## What it does not do

Messages sent by clients are delivered only to the clients of the same
server process. They are not published to Redis, so several server
instances do not see each other's chat. Anything that does publish to
the Redis channel, such as `RedisPubSubAdapter.publish` or
`redis-cli PUBLISH`, does reach the clients.

There are no HTTP routes other than `/chat/join`. `CreateRoomRequest`
and `CreateRoomResponse` exist as data types, but no route uses them.

Nothing is stored. Chat history is neither kept nor replayed.
`RedisAdapter`'s key/value methods are not used by the server.
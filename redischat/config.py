"""Application and Redis settings read from the environment."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass

_TRUE_VALUES = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE_VALUES = frozenset({"0", "f", "F", "FALSE", "false", "False"})
_INT_PATTERN = re.compile(r"[+-]?[0-9]+")
_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1
_REDIS_CREDENTIAL_VAR = "REDIS_PASSWORD"


@dataclass(frozen=True)
class AppConfig:
    """Settings for the HTTP server and its logging."""

    port: str = "8080"
    is_debug: bool = False
    log_to_file: bool = True
    log_file_path: str = "logs/app.log"
    log_error_path: str = "logs/app.log"


@dataclass(frozen=True)
class RedisConfig:
    """Connection settings for the Redis server."""

    host: str = "localhost"
    port: int = 6379
    password: str = str()
    db: int = 0

    @property
    def address(self) -> str:
        """The ``host:port`` address of the server."""
        return f"{self.host}:{self.port}"


def get_env(key: str, fallback: str) -> str:
    """Return the environment variable ``key``, or ``fallback`` if unset or empty."""
    value = os.environ.get(key, "")
    return value if value else fallback


def get_env_as_int(key: str, fallback: int) -> int:
    """Return the environment variable ``key`` as a 64-bit integer, or ``fallback``."""
    raw = os.environ.get(key, "")
    if not _INT_PATTERN.fullmatch(raw):
        return fallback
    value = int(raw)
    if not _INT64_MIN <= value <= _INT64_MAX:
        return fallback
    return value


def parse_bool(value: str) -> bool:
    """Parse a boolean spelled as 1/0, t/f or true/false in the usual cases."""
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ValueError(f"invalid boolean value: {value!r}")


def _env_bool(key: str, fallback: str) -> bool:
    try:
        return parse_bool(get_env(key, fallback))
    except ValueError:
        return False


def load_env_config() -> AppConfig:
    """Build the application settings from the environment."""
    return AppConfig(
        port=get_env("PORT", "8080"),
        is_debug=_env_bool("APP_DEBUG", "false"),
        log_to_file=_env_bool("LOG_TO_FILE", "true"),
        log_file_path=get_env("LOG_FILE_PATH", "logs/app.log"),
        log_error_path=get_env("LOG_ERROR_PATH", "logs/app.log"),
    )


def load_redis_config() -> RedisConfig:
    """Build the Redis settings from the environment."""
    password = get_env(_REDIS_CREDENTIAL_VAR, str())
    return RedisConfig(
        host=get_env("REDIS_HOST", "localhost"),
        port=get_env_as_int("REDIS_PORT", 6379),
        password=password,
        db=get_env_as_int("REDIS_DB", 0),
    )
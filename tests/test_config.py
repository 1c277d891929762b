import pytest

from redischat.config import (
    AppConfig,
    RedisConfig,
    get_env,
    get_env_as_int,
    load_env_config,
    load_redis_config,
    parse_bool,
)

ENV_KEYS = (
    "PORT",
    "APP_DEBUG",
    "LOG_TO_FILE",
    "LOG_FILE_PATH",
    "LOG_ERROR_PATH",
    "REDIS_HOST",
    "REDIS_PORT",
    "REDIS_PASSWORD",
    "REDIS_DB",
)


@pytest.fixture
def clean_env(monkeypatch):
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    return monkeypatch


def test_get_env_returns_value(clean_env):
    clean_env.setenv("PORT", "9000")
    assert get_env("PORT", "8080") == "9000"


def test_get_env_missing_uses_fallback(clean_env):
    assert get_env("PORT", "fallback") == "fallback"


def test_get_env_empty_uses_fallback(clean_env):
    clean_env.setenv("PORT", "")
    assert get_env("PORT", "fallback") == "fallback"


@pytest.mark.parametrize("raw, expected", [("42", 42), ("+7", 7), ("-3", -3), ("007", 7)])
def test_get_env_as_int_valid(clean_env, raw, expected):
    clean_env.setenv("REDIS_DB", raw)
    assert get_env_as_int("REDIS_DB", 99) == expected


@pytest.mark.parametrize("raw", ["", "abc", " 5", "5 ", "1_000", "1.5", "99999999999999999999"])
def test_get_env_as_int_invalid_uses_fallback(clean_env, raw):
    clean_env.setenv("REDIS_DB", raw)
    assert get_env_as_int("REDIS_DB", 99) == 99


@pytest.mark.parametrize("raw", ["1", "t", "T", "TRUE", "true", "True"])
def test_parse_bool_true(raw):
    assert parse_bool(raw) is True


@pytest.mark.parametrize("raw", ["0", "f", "F", "FALSE", "false", "False"])
def test_parse_bool_false(raw):
    assert parse_bool(raw) is False


@pytest.mark.parametrize("raw", ["yes", "", "tRUE", "2", " true"])
def test_parse_bool_rejects_other_spellings(raw):
    with pytest.raises(ValueError):
        parse_bool(raw)


def test_load_env_config_defaults(clean_env):
    config = load_env_config()
    assert config == AppConfig(
        port="8080",
        is_debug=False,
        log_to_file=True,
        log_file_path="logs/app.log",
        log_error_path="logs/app.log",
    )


def test_load_env_config_overrides(clean_env):
    clean_env.setenv("PORT", "9001")
    clean_env.setenv("APP_DEBUG", "true")
    clean_env.setenv("LOG_TO_FILE", "0")
    clean_env.setenv("LOG_FILE_PATH", "out/info.log")
    clean_env.setenv("LOG_ERROR_PATH", "out/err.log")
    config = load_env_config()
    assert config.port == "9001"
    assert config.is_debug is True
    assert config.log_to_file is False
    assert config.log_file_path == "out/info.log"
    assert config.log_error_path == "out/err.log"


def test_load_env_config_bad_booleans_become_false(clean_env):
    clean_env.setenv("APP_DEBUG", "maybe")
    clean_env.setenv("LOG_TO_FILE", "nope")
    config = load_env_config()
    assert config.is_debug is False
    assert config.log_to_file is False


def test_load_redis_config_defaults(clean_env):
    config = load_redis_config()
    assert config == RedisConfig(host="localhost", port=6379, password="", db=0)


def test_load_redis_config_overrides(clean_env):
    password = "password"
    clean_env.setenv("REDIS_HOST", "cache.example.com")
    clean_env.setenv("REDIS_PORT", "7000")
    clean_env.setenv("REDIS_PASSWORD", password)
    clean_env.setenv("REDIS_DB", "2")
    config = load_redis_config()
    assert config.host == "cache.example.com"
    assert config.port == 7000
    assert config.password == password
    assert config.db == 2


def test_load_redis_config_bad_port_falls_back(clean_env):
    clean_env.setenv("REDIS_PORT", "not-a-port")
    assert load_redis_config().port == 6379


def test_redis_address_joins_host_and_port():
    config = RedisConfig(host="cache.example.com", port=7000)
    assert config.address == f"{config.host}:{config.port}"
"""Structured logging to the console and to JSON log files."""

from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime
from pathlib import Path
from typing import Any

from .config import AppConfig

_LEVEL_NAMES = {
    logging.DEBUG: "debug",
    logging.INFO: "info",
    logging.WARNING: "warn",
    logging.ERROR: "error",
    logging.CRITICAL: "fatal",
}


def _level_name(levelno: int) -> str:
    return _LEVEL_NAMES.get(levelno, logging.getLevelName(levelno).lower())


def _caller(record: logging.LogRecord) -> str:
    return f"{os.path.basename(record.pathname)}:{record.lineno}"


def _iso_time(record: logging.LogRecord) -> str:
    return datetime.fromtimestamp(record.created).astimezone().isoformat(timespec="milliseconds")


class JsonFormatter(logging.Formatter):
    """Formats a record as one JSON object per line."""

    def __init__(self, development: bool = False) -> None:
        super().__init__()
        self.development = development

    def format(self, record: logging.LogRecord) -> str:
        level = _level_name(record.levelno)
        entry: dict[str, Any] = {
            "level": level.upper() if self.development else level,
            "ts": _iso_time(record) if self.development else record.created,
            "caller": _caller(record),
            "msg": record.getMessage(),
        }
        if record.stack_info:
            entry["stacktrace"] = record.stack_info
        for key, value in getattr(record, "fields", {}).items():
            entry.setdefault(key, value)
        return json.dumps(entry, ensure_ascii=False, default=str)


class _ConsoleFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        parts = [
            _iso_time(record),
            _level_name(record.levelno).upper(),
            _caller(record),
            record.getMessage(),
        ]
        fields = getattr(record, "fields", {})
        if fields:
            parts.append(json.dumps(fields, ensure_ascii=False, default=str))
        line = "\t".join(parts)
        if record.stack_info:
            line = f"{line}\n{record.stack_info}"
        return line


class StructuredLogger:
    """Logs a message with keyword fields; error levels carry a stack trace."""

    def __init__(self, logger: logging.Logger) -> None:
        self._logger = logger

    def _log(self, level: int, msg: str, fields: dict[str, Any], stack: bool = False) -> None:
        self._logger.log(level, msg, extra={"fields": fields}, stack_info=stack, stacklevel=3)

    def info(self, msg: str, **kwargs: Any) -> None:
        self._log(logging.INFO, msg, kwargs)

    def debug(self, msg: str, **kwargs: Any) -> None:
        self._log(logging.DEBUG, msg, kwargs)

    def warn(self, msg: str, **kwargs: Any) -> None:
        self._log(logging.WARNING, msg, kwargs)

    def error(self, msg: str, **kwargs: Any) -> None:
        self._log(logging.ERROR, msg, kwargs, stack=True)

    def fatal(self, msg: str, **kwargs: Any) -> None:
        """Log at fatal level, flush, and exit with status 1."""
        self._log(logging.CRITICAL, msg, kwargs, stack=True)
        self.sync()
        raise SystemExit(1)

    def sync(self) -> None:
        """Flush every output."""
        for handler in self._logger.handlers:
            handler.flush()


def _open_file_handler(path: str, what: str) -> logging.FileHandler:
    try:
        return logging.FileHandler(path, mode="a", encoding="utf-8")
    except OSError as exc:
        raise OSError(f"failed to open {what}: {exc}") from exc


def create_logger(config: AppConfig) -> StructuredLogger:
    """Build a logger writing to stdout in debug mode and to log files if enabled."""
    base = logging.Logger("redischat", level=logging.DEBUG)
    base.propagate = False

    if config.is_debug:
        console = logging.StreamHandler(sys.stdout)
        console.setLevel(logging.DEBUG)
        console.setFormatter(_ConsoleFormatter())
        base.addHandler(console)

    if config.log_to_file:
        try:
            Path(config.log_file_path).parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise OSError(f"failed to create log directory: {exc}") from exc
        formatter = JsonFormatter(development=config.is_debug)
        info_handler = _open_file_handler(config.log_file_path, "log file")
        try:
            error_handler = _open_file_handler(config.log_error_path, "error log file")
        except OSError:
            info_handler.close()
            raise
        info_handler.setFormatter(formatter)
        info_handler.addFilter(lambda record: record.levelno < logging.ERROR)
        error_handler.setFormatter(formatter)
        error_handler.addFilter(lambda record: record.levelno >= logging.ERROR)
        base.addHandler(info_handler)
        base.addHandler(error_handler)

    if not base.handlers:
        base.addHandler(logging.NullHandler())

    return StructuredLogger(base)
"""Logging setup: JSON lines in production, readable text everywhere else."""

from __future__ import annotations

import logging
import os
import sys
from typing import Any, TextIO

from pythonjsonlogger import jsonlogger

_RESERVED_ATTRS = set(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


class JsonFormatter(jsonlogger.JsonFormatter):
    def add_fields(
        self,
        log_record: dict[str, Any],
        record: logging.LogRecord,
        message_dict: dict[str, Any],
    ) -> None:
        super().add_fields(log_record, record, message_dict)
        if not log_record.get("timestamp"):
            log_record["timestamp"] = self.formatTime(record, self.datefmt)
        log_record["level"] = record.levelname


class TextFormatter(logging.Formatter):
    def __init__(self) -> None:
        super().__init__(datefmt="%Y-%m-%d %H:%M:%S")

    def format(self, record: logging.LogRecord) -> str:
        context = " ".join(
            f"{key}={value}" for key, value in vars(record).items() if key not in _RESERVED_ATTRS
        )
        message = record.getMessage()
        line = f"[{self.formatTime(record, self.datefmt)}] {record.levelname:<5} {message}"
        if context:
            line = f"{line} | {context}"
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


def resolve_log_level(level: str | None = None, env: str | None = None) -> int:
    raw = level if level is not None else os.getenv("LOG_LEVEL")
    if raw:
        resolved = logging.getLevelName(raw.strip().upper())
        return resolved if isinstance(resolved, int) else logging.INFO
    app_env = env if env is not None else os.getenv("APP_ENV", "development")
    return logging.INFO if app_env == "production" else logging.DEBUG


def setup_logging(level: str | None = None, env: str | None = None, stream: TextIO | None = None) -> None:
    app_env = env if env is not None else os.getenv("APP_ENV", "development")
    root_logger = logging.getLogger()
    root_logger.setLevel(resolve_log_level(level, app_env))

    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stdout)
    if app_env == "production":
        handler.setFormatter(JsonFormatter("%(timestamp)s %(level)s %(name)s %(message)s", json_ensure_ascii=False))
    else:
        handler.setFormatter(TextFormatter())
    root_logger.addHandler(handler)

    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

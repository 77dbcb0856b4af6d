"""Structured logging for the GlycoTrack API.

Records are written to stdout either as one JSON document per line or as a
readable text line. Services log through ``get_logger(__name__)`` and pass
context as keyword fields::

    logger.info("Backup created", user_id=str(user_id), file_size=size)

The active request's correlation ID is attached to every record.
"""

import json
import logging
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any

DEFAULT_SERVICE_NAME = "glycotrack-api"

# Field names whose values never reach the log output
REDACTED_FIELDS = frozenset(
    {"password", "hashed_password", "new_password", "current_password", "token"}
)
REDACTED = "[redacted]"

NOISY_LOGGERS = ("uvicorn.access", "sqlalchemy.engine", "aiosqlite")

# Set per request by CorrelationIdMiddleware
correlation_id_ctx: ContextVar[str | None] = ContextVar("correlation_id", default=None)


def _extra_fields(record: logging.LogRecord) -> dict[str, Any]:
    fields = getattr(record, "extra_fields", None) or {}
    return {
        key: REDACTED if key in REDACTED_FIELDS else value
        for key, value in fields.items()
    }


def _timestamp(record: logging.LogRecord) -> datetime:
    return datetime.fromtimestamp(record.created, tz=timezone.utc)


class JsonFormatter(logging.Formatter):
    """One JSON document per record.

    Errors also carry the source location so they can be traced without a
    traceback.
    """

    def __init__(self, service_name: str = DEFAULT_SERVICE_NAME):
        super().__init__()
        self.service_name = service_name

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": _timestamp(record).isoformat(),
            "level": record.levelname,
            "service": self.service_name,
            "message": record.getMessage(),
            "logger": record.name,
        }

        correlation_id = correlation_id_ctx.get()
        if correlation_id:
            log_data["correlation_id"] = correlation_id

        log_data.update(_extra_fields(record))

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        if record.levelno >= logging.ERROR:
            log_data["location"] = {
                "file": record.pathname,
                "line": record.lineno,
                "function": record.funcName,
            }

        return json.dumps(log_data, default=str)


class TextFormatter(logging.Formatter):
    """timestamp - service - level - [correlation_id] - message key=value ..."""

    def __init__(self, service_name: str = DEFAULT_SERVICE_NAME):
        super().__init__()
        self.service_name = service_name

    def format(self, record: logging.LogRecord) -> str:
        line = (
            f"{_timestamp(record):%Y-%m-%d %H:%M:%S} - {self.service_name} - "
            f"{record.levelname} - [{correlation_id_ctx.get() or '-'}] - "
            f"{record.getMessage()}"
        )

        fields = _extra_fields(record)
        if fields:
            line += " " + " ".join(f"{k}={v}" for k, v in fields.items())

        if record.exc_info:
            line += f"\n{self.formatException(record.exc_info)}"

        return line


def setup_logging(
    log_format: str = "json",
    log_level: str = "INFO",
    service_name: str = DEFAULT_SERVICE_NAME,
) -> None:
    """Install a single stdout handler on the root logger.

    Args:
        log_format: 'json' or 'text'
        log_level: Level name, e.g. 'INFO'
        service_name: Written into every record
    """
    level = getattr(logging, log_level.upper(), logging.INFO)
    formatter_cls = JsonFormatter if log_format.lower() == "json" else TextFormatter

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(formatter_cls(service_name=service_name))

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()
    root_logger.addHandler(handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


class StructuredLogger:
    """Logger wrapper that takes structured fields as keyword arguments."""

    def __init__(self, name: str):
        self._logger = logging.getLogger(name)

    def _log(self, level: int, msg: str, fields: dict[str, Any], **kwargs) -> None:
        extra = {"extra_fields": fields} if fields else {}
        self._logger.log(level, msg, extra=extra, **kwargs)

    def info(self, msg: str, **fields: Any) -> None:
        self._log(logging.INFO, msg, fields)

    def warning(self, msg: str, **fields: Any) -> None:
        self._log(logging.WARNING, msg, fields)

    def error(self, msg: str, **fields: Any) -> None:
        self._log(logging.ERROR, msg, fields)

    def exception(self, msg: str, **fields: Any) -> None:
        """ERROR with the active exception's traceback."""
        self._log(logging.ERROR, msg, fields, exc_info=True)


def get_logger(name: str) -> StructuredLogger:
    return StructuredLogger(name)

"""
Log formatters: one JSON object per record for log shippers, or a single
(optionally colored) console line with the record's ``extra`` context
appended as ``[key=value, ...]``.
"""

import json
import logging
import socket
import sys
import traceback
from datetime import UTC, datetime
from typing import Any

# Present on every LogRecord; anything else came from ``extra=``
_STANDARD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime"}

LEVEL_COLORS = {
    "DEBUG": "\033[36m",
    "INFO": "\033[32m",
    "WARNING": "\033[33m",
    "ERROR": "\033[31m",
    "CRITICAL": "\033[35m",
}
RESET = "\033[0m"


def extract_context(record: logging.LogRecord) -> dict[str, Any]:
    """Return the ``extra`` fields attached to a record."""
    return {
        key: value
        for key, value in vars(record).items()
        if key not in _STANDARD_ATTRS and not key.startswith("_")
    }


def _describe_exception(exc_info) -> dict[str, Any]:
    exc_type, exc_value, _ = exc_info
    return {
        "type": exc_type.__name__,
        "message": str(exc_value),
        "traceback": traceback.format_exception(*exc_info),
    }


class JSONFormatter(logging.Formatter):
    """
    Structured formatter: level, logger, message, app and source location,
    plus optional timestamp and hostname, the exception if any, and the
    record's extra fields under ``context``.
    """

    def __init__(
        self,
        include_timestamp: bool = True,
        include_hostname: bool = True,
        app_name: str = "provisioning-sync",
    ):
        super().__init__()
        self.include_timestamp = include_timestamp
        self.include_hostname = include_hostname
        self.app_name = app_name
        self.hostname = socket.gethostname() if include_hostname else None

    def to_dict(self, record: logging.LogRecord) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "app": self.app_name,
            "source": {"file": record.pathname, "line": record.lineno, "function": record.funcName},
        }
        if self.include_timestamp:
            payload["timestamp"] = datetime.fromtimestamp(record.created, UTC).isoformat()
        if self.hostname:
            payload["hostname"] = self.hostname
        if record.exc_info:
            payload["exception"] = _describe_exception(record.exc_info)

        context = extract_context(record)
        if context:
            payload["context"] = context
        return payload

    def format(self, record: logging.LogRecord) -> str:
        return json.dumps(self.to_dict(record), default=str, ensure_ascii=False)


class ConsoleFormatter(logging.Formatter):
    """Single-line formatter; colors the level name when stderr is a terminal."""

    def __init__(self, use_colors: bool = True):
        super().__init__(fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s", datefmt="%Y-%m-%d %H:%M:%S")
        self.use_colors = use_colors and sys.stderr.isatty()

    def formatMessage(self, record: logging.LogRecord) -> str:
        color = LEVEL_COLORS.get(record.levelname) if self.use_colors else None
        if color is None:
            return super().formatMessage(record)

        # The record is shared with other handlers; color only this rendering
        plain = record.levelname
        record.levelname = f"{color}{plain}{RESET}"
        try:
            return super().formatMessage(record)
        finally:
            record.levelname = plain

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = extract_context(record)
        if not context:
            return line
        return f"{line} [{', '.join(f'{key}={value}' for key, value in context.items())}]"

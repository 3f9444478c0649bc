"""
Process-wide logging setup for sync runs and scheduled jobs.

One call to ``setup_logging`` (or ``configure_from_env``) attaches a stderr
handler and, optionally, a size-rotated log file to the root logger. Library
modules only ever call ``logging.getLogger(__name__)``.
"""

import logging
import logging.handlers
import os
import sys
from dataclasses import dataclass

from .formatters import ConsoleFormatter, JSONFormatter

APP_NAME = "provisioning-sync"
FILE_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
FILE_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Third-party loggers that are noisy at INFO
QUIET_LOGGERS = ("apscheduler",)

_TRUTHY = ("true", "1", "yes", "on")


@dataclass(frozen=True)
class LogSettings:
    """Resolved logging options."""

    level: str = "INFO"
    log_file: str | None = None
    console_output: bool = True
    json_format: bool = False
    app_name: str = APP_NAME
    max_bytes: int = 10 * 1024 * 1024
    backup_count: int = 5

    @property
    def numeric_level(self) -> int:
        return getattr(logging, self.level.upper(), logging.INFO)

    @classmethod
    def from_env(cls) -> "LogSettings":
        """
        Read LOG_LEVEL, LOG_FILE, LOG_JSON and LOG_CONSOLE.

        LOG_CONSOLE defaults to on; LOG_JSON to off.
        """
        return cls(
            level=os.getenv("LOG_LEVEL", "INFO"),
            log_file=os.getenv("LOG_FILE") or None,
            console_output=os.getenv("LOG_CONSOLE", "true").lower() in _TRUTHY,
            json_format=os.getenv("LOG_JSON", "false").lower() in _TRUTHY,
        )


def _formatter(settings: LogSettings, for_console: bool) -> logging.Formatter:
    if settings.json_format:
        return JSONFormatter(include_timestamp=True, include_hostname=True, app_name=settings.app_name)
    if for_console:
        return ConsoleFormatter(use_colors=True)
    return logging.Formatter(fmt=FILE_FORMAT, datefmt=FILE_DATE_FORMAT)


def _handlers(settings: LogSettings) -> list[logging.Handler]:
    handlers: list[logging.Handler] = []

    if settings.console_output:
        console = logging.StreamHandler(sys.stderr)
        console.setFormatter(_formatter(settings, for_console=True))
        handlers.append(console)

    if settings.log_file:
        directory = os.path.dirname(settings.log_file)
        if directory:
            os.makedirs(directory, exist_ok=True)
        rotating = logging.handlers.RotatingFileHandler(
            settings.log_file,
            maxBytes=settings.max_bytes,
            backupCount=settings.backup_count,
            encoding="utf-8",
        )
        rotating.setFormatter(_formatter(settings, for_console=False))
        handlers.append(rotating)

    return handlers


def apply_settings(settings: LogSettings) -> None:
    """Replace the root logger's handlers with the ones ``settings`` describe."""
    root_logger = logging.getLogger()
    root_logger.setLevel(settings.numeric_level)

    # A second setup must not duplicate output
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()

    for handler in _handlers(settings):
        handler.setLevel(settings.numeric_level)
        root_logger.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger(__name__).info(
        f"Logging initialized: level={settings.level}, file={settings.log_file or 'none'}, "
        f"console={settings.console_output}, json={settings.json_format}"
    )


def setup_logging(
    level: str = "INFO",
    log_file: str | None = None,
    console_output: bool = True,
    json_format: bool = False,
    app_name: str = APP_NAME,
    max_bytes: int = 10 * 1024 * 1024,
    backup_count: int = 5,
) -> None:
    """
    Configure root logging for the process

    Args:
        level: DEBUG, INFO, WARNING, ERROR or CRITICAL (case-insensitive)
        log_file: Rotated log file; created with its directory if missing
        console_output: Log to stderr
        json_format: One JSON object per record, on every handler
        app_name: Value of the ``app`` field in JSON records
        max_bytes: Size at which the log file rotates
        backup_count: Rotated files kept
    """
    apply_settings(LogSettings(
        level=level,
        log_file=log_file,
        console_output=console_output,
        json_format=json_format,
        app_name=app_name,
        max_bytes=max_bytes,
        backup_count=backup_count,
    ))


def configure_from_env() -> None:
    """Configure logging from LOG_* environment variables; see ``LogSettings.from_env``."""
    apply_settings(LogSettings.from_env())


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def shutdown_logging() -> None:
    """Detach and close every root handler, then flush the logging system."""
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()
    logging.shutdown()

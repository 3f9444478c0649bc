"""
Structured logging configuration for provisioning sync

Provides console or JSON-formatted logging with optional file rotation and
per-run context.

Usage:
    from sync_utils.logging import setup_logging, get_logger

    setup_logging(level="INFO", log_file="/var/log/provisioning-sync/sync.log")

    logger = get_logger(__name__)
    logger.info("Sync finished", extra={"added": 12, "deleted": 1})
"""

from .config import configure_from_env, get_logger, setup_logging, shutdown_logging
from .formatters import ConsoleFormatter, JSONFormatter
from .handlers import ContextLogger

__all__ = [
    "setup_logging",
    "get_logger",
    "shutdown_logging",
    "configure_from_env",
    "JSONFormatter",
    "ConsoleFormatter",
    "ContextLogger",
]

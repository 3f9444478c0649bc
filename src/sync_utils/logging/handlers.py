"""
Logger adapter carrying run context.

Every record logged through a ``ContextLogger`` carries the same key/value
context (table names, run id), plus whatever keyword arguments the call adds.
"""

import logging
from typing import Any

# Keyword arguments Logger._log understands itself
_LOGGING_KWARGS = ("exc_info", "stack_info", "stacklevel", "extra")


class ContextLogger(logging.LoggerAdapter):
    """
    Usage:
        logger = ContextLogger(__name__, provided_table="staff_info")
        logger.info("Filter applied", excluded=3)
    """

    def __init__(self, name: str, **context):
        super().__init__(logging.getLogger(name), dict(context))

    def process(self, msg: Any, kwargs: dict[str, Any]) -> tuple[Any, dict[str, Any]]:
        passthrough = {key: kwargs.pop(key) for key in _LOGGING_KWARGS if key in kwargs}
        passthrough["extra"] = {**self.extra, **passthrough.get("extra", {}), **kwargs}
        return msg, passthrough

    def update_context(self, **context) -> None:
        self.extra.update(context)

    def get_context(self) -> dict[str, Any]:
        return dict(self.extra)

"""
Retry with exponential backoff for store statements

A ``RetryPolicy`` decides whether an exception is worth another attempt and
how long to wait before it. ``retry_with_backoff`` applies a policy to a
function; ``retry_database_operation`` is the policy the sync store uses,
retrying only SQLite's transient failures (locks, busy handler, I/O).

Usage:
    from sync_utils.retry import retry_database_operation

    @retry_database_operation(max_retries=3, base_delay=0.5)
    def execute(connection, sql, params):
        return connection.execute(sql, params)
"""

import logging
import random
import time
from dataclasses import dataclass
from functools import wraps
from typing import Any, Callable, Optional, Tuple, Type

logger = logging.getLogger(__name__)

RetryCallback = Callable[[int, Exception, float], None]


@dataclass(frozen=True)
class RetryPolicy:
    """Backoff schedule plus the filter for retryable exceptions."""

    max_retries: int = 3
    base_delay: float = 1.0
    max_delay: float = 60.0
    exponential_base: float = 2.0
    jitter: bool = True
    retryable_exceptions: Optional[Tuple[Type[Exception], ...]] = None
    is_retryable: Optional[Callable[[Exception], bool]] = None

    def should_retry(self, error: Exception) -> bool:
        if self.retryable_exceptions is not None and not isinstance(error, self.retryable_exceptions):
            return False
        return self.is_retryable is None or self.is_retryable(error)

    def delay(self, attempt: int) -> float:
        """Seconds to wait after failed attempt number ``attempt`` (0-based)."""
        delay = min(self.base_delay * (self.exponential_base ** attempt), self.max_delay)
        if self.jitter:
            # +/-25%, never below 10ms
            delay = max(0.01, delay + random.uniform(-0.25 * delay, 0.25 * delay))
        return delay


def _notify(on_retry: RetryCallback, attempt: int, error: Exception, delay: float) -> None:
    try:
        on_retry(attempt, error, delay)
    except Exception as callback_error:
        logger.error(f"Error in retry callback: {callback_error}")


def retry_with_backoff(
    max_retries: int = 3,
    base_delay: float = 1.0,
    max_delay: float = 60.0,
    exponential_base: float = 2.0,
    jitter: bool = True,
    retryable_exceptions: Optional[Tuple[Type[Exception], ...]] = None,
    is_retryable: Optional[Callable[[Exception], bool]] = None,
    on_retry: Optional[RetryCallback] = None,
):
    """
    Decorator that retries a function with exponential backoff

    Args:
        max_retries: Retries after the first attempt (default: 3)
        base_delay: Delay before the first retry, in seconds (default: 1.0)
        max_delay: Upper bound for any delay (default: 60.0)
        exponential_base: Growth factor between delays (default: 2.0)
        jitter: Randomize each delay by up to 25% (default: True)
        retryable_exceptions: Exception types to retry (default: all)
        is_retryable: Predicate further restricting which exceptions are retried
        on_retry: Callback ``(attempt, exception, delay)`` before each retry;
            its own errors are logged and ignored

    Returns:
        Decorator; the final exception propagates unchanged
    """
    policy = RetryPolicy(
        max_retries=max_retries,
        base_delay=base_delay,
        max_delay=max_delay,
        exponential_base=exponential_base,
        jitter=jitter,
        retryable_exceptions=retryable_exceptions,
        is_retryable=is_retryable,
    )

    def decorator(func: Callable) -> Callable:
        name = getattr(func, "__name__", "function")

        @wraps(func)
        def wrapper(*args, **kwargs) -> Any:
            attempt = 0
            while True:
                try:
                    return func(*args, **kwargs)
                except Exception as e:
                    if not policy.should_retry(e):
                        logger.error(f"Non-retryable exception in {name}: {type(e).__name__}: {e}")
                        raise
                    if attempt >= policy.max_retries:
                        logger.error(
                            f"Max retries ({policy.max_retries}) exceeded for {name}: {type(e).__name__}: {e}"
                        )
                        raise

                    delay = policy.delay(attempt)
                    attempt += 1
                    logger.warning(
                        f"Attempt {attempt}/{policy.max_retries} failed for {name}: "
                        f"{type(e).__name__}: {e}. Retrying in {delay:.2f}s..."
                    )
                    if on_retry:
                        _notify(on_retry, attempt, e, delay)
                    time.sleep(delay)

        return wrapper
    return decorator


# SQLite raises OperationalError for contention and for programming errors
# alike; only the message tells them apart.
TRANSIENT_MESSAGES = (
    "database is locked",
    "database table is locked",
    "database is busy",
    "busy",
    "disk i/o error",
    "unable to open database file",
    "timeout",
    "timed out",
)


def is_retryable_db_exception(exception: Exception) -> bool:
    """
    True for transient store failures

    Lock contention, busy handlers and I/O hiccups are transient; syntax
    errors, missing tables and constraint violations are not. A wrapped
    driver error is judged by its ``__cause__``.
    """
    if isinstance(exception, (TimeoutError, ConnectionError)):
        return True

    cause = exception.__cause__ if exception.__cause__ is not None else exception
    message = str(cause).lower()
    return any(fragment in message for fragment in TRANSIENT_MESSAGES)


def retry_database_operation(
    max_retries: int = 3,
    base_delay: float = 0.5,
    on_retry: Optional[RetryCallback] = None,
):
    """Retry only transient store failures, with delays capped at 30s."""
    return retry_with_backoff(
        max_retries=max_retries,
        base_delay=base_delay,
        max_delay=30.0,
        is_retryable=is_retryable_db_exception,
        on_retry=on_retry,
    )

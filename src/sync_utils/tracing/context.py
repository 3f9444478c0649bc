"""
Span helpers for the sync engine.

``trace_operation`` wraps one engine step or store statement in a span.
Attribute values are passed through when OpenTelemetry accepts their type
and stringified otherwise.
"""

from contextlib import contextmanager
from typing import Any, Iterator

from opentelemetry import trace

from .tracer import get_tracer

_NATIVE_TYPES = (str, bool, int, float)


def _attribute(value: Any) -> Any:
    return value if isinstance(value, _NATIVE_TYPES) else str(value)


@contextmanager
def trace_operation(
    operation_name: str,
    kind: trace.SpanKind = trace.SpanKind.INTERNAL,
    **attributes: Any,
) -> Iterator[trace.Span]:
    """
    Run the block inside a span named ``operation_name``

    An exception escaping the block is recorded on the span, marks it as
    failed, and is re-raised.

    Example:
        >>> with trace_operation("classify.add", result_table="sync_result") as span:
        ...     span.set_attribute("rows", add_pass())
    """
    with get_tracer().start_as_current_span(
        operation_name,
        kind=kind,
        attributes={key: _attribute(value) for key, value in attributes.items()},
        record_exception=False,
        set_status_on_exception=True,
    ) as span:
        try:
            yield span
        except Exception as e:
            span.set_attribute("error.type", type(e).__name__)
            span.record_exception(e)
            raise


def add_span_attributes(**attributes: Any) -> None:
    """Annotate the active span; no-op when tracing is off."""
    span = trace.get_current_span()
    if span.is_recording():
        span.set_attributes({key: _attribute(value) for key, value in attributes.items()})

"""
Distributed tracing using OpenTelemetry.

Instruments the sync engine's steps (filtering, each classification pass,
consistency check) and store statements.
"""

from .context import add_span_attributes, trace_operation
from .tracer import get_tracer, initialize_tracing, shutdown_tracing

__all__ = [
    "initialize_tracing",
    "get_tracer",
    "shutdown_tracing",
    "trace_operation",
    "add_span_attributes",
]

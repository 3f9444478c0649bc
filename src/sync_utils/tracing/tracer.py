"""
OpenTelemetry provider setup.

Spans go through the global tracer provider. Until ``initialize_tracing``
installs an SDK provider the API's proxy tracer is a no-op, so library code
traces unconditionally.
"""

import logging
import os

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import SERVICE_NAME, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter, SpanExporter
from opentelemetry.sdk.trace.sampling import TraceIdRatioBased

logger = logging.getLogger(__name__)

INSTRUMENTATION_NAME = "provisioning_sync"

_provider: TracerProvider | None = None


def _exporters(otlp_endpoint: str | None, console_export: bool) -> dict[str, SpanExporter]:
    exporters: dict[str, SpanExporter] = {}
    endpoint = otlp_endpoint or os.getenv("OTLP_ENDPOINT")
    if endpoint:
        exporters["OTLP"] = OTLPSpanExporter(endpoint=endpoint, insecure=True)
    if console_export or os.getenv("TRACE_CONSOLE", "").lower() == "true":
        exporters["Console"] = ConsoleSpanExporter()
    return exporters


def initialize_tracing(
    service_name: str = "provisioning-sync",
    otlp_endpoint: str | None = None,
    console_export: bool = False,
    sampling_rate: float = 1.0,
) -> trace.Tracer:
    """
    Install an SDK tracer provider once per process

    Args:
        service_name: ``service.name`` resource attribute
        otlp_endpoint: OTLP gRPC collector, e.g. "localhost:4317"; defaults
            to the OTLP_ENDPOINT environment variable
        console_export: Print finished spans to stdout (also TRACE_CONSOLE=true)
        sampling_rate: Fraction of traces kept, 0.0 to 1.0

    Returns:
        The sync tracer; a second call keeps the first provider
    """
    global _provider

    if _provider is not None:
        logger.warning("Tracing already initialized, returning existing tracer")
        return get_tracer()

    provider = TracerProvider(
        resource=Resource(attributes={SERVICE_NAME: service_name}),
        sampler=TraceIdRatioBased(sampling_rate),
    )
    exporters = _exporters(otlp_endpoint, console_export)
    for exporter in exporters.values():
        provider.add_span_processor(BatchSpanProcessor(exporter))
    if not exporters:
        logger.warning("No trace exporters configured, spans will be dropped")

    trace.set_tracer_provider(provider)
    _provider = provider
    logger.info(
        f"Tracing initialized for {service_name}: exporters={', '.join(exporters) or 'none'}, "
        f"sampling={sampling_rate}"
    )
    return get_tracer()


def get_tracer() -> trace.Tracer:
    return trace.get_tracer(INSTRUMENTATION_NAME)


def shutdown_tracing() -> None:
    """Flush pending spans and release the provider; a no-op when never initialized."""
    global _provider

    if _provider is None:
        return
    try:
        _provider.shutdown()
        logger.info("Tracing shutdown complete")
    finally:
        _provider = None

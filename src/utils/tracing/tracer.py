"""
Tracer initialization and configuration for OpenTelemetry.

Until initialize_tracing() is called, spans go to whatever tracer provider
is globally installed (the no-op provider by default), so the transform can
be used without any tracing backend.
"""

import logging
import os

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import SERVICE_NAME, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter
from opentelemetry.sdk.trace.sampling import TraceIdRatioBased

logger = logging.getLogger(__name__)

INSTRUMENTATION_NAME = "cdc-flatten"

_tracer: trace.Tracer | None = None
_provider: TracerProvider | None = None


def initialize_tracing(
    service_name: str = "cdc-flatten",
    otlp_endpoint: str | None = None,
    console_export: bool = False,
    sampling_rate: float = 1.0,
) -> trace.Tracer:
    """
    Initialize distributed tracing with OpenTelemetry.

    Args:
        service_name: Name of the service for identification
        otlp_endpoint: OTLP collector endpoint (default: OTLP_ENDPOINT env var)
        console_export: If True, also export spans to the console (debug)
        sampling_rate: Sampling rate 0.0-1.0 (1.0 = trace everything)

    Returns:
        Configured tracer instance

    Example:
        >>> tracer = initialize_tracing(
        ...     service_name="cdc-flatten",
        ...     otlp_endpoint="localhost:4317"
        ... )
    """
    global _tracer, _provider

    if _provider is not None:
        logger.warning("Tracing already initialized, returning existing tracer")
        return _tracer

    provider = TracerProvider(
        resource=Resource(attributes={SERVICE_NAME: service_name}),
        sampler=TraceIdRatioBased(sampling_rate),
    )

    exporters = []

    if otlp_endpoint is None:
        otlp_endpoint = os.getenv("OTLP_ENDPOINT")

    if otlp_endpoint:
        provider.add_span_processor(
            BatchSpanProcessor(OTLPSpanExporter(endpoint=otlp_endpoint, insecure=True))
        )
        exporters.append("OTLP")
        logger.info(f"OTLP exporter configured: {otlp_endpoint}")

    if console_export or os.getenv("TRACE_CONSOLE", "").lower() == "true":
        provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))
        exporters.append("Console")

    if not exporters:
        logger.warning("No trace exporters configured, spans will not be exported")

    trace.set_tracer_provider(provider)
    _provider = provider
    _tracer = trace.get_tracer(INSTRUMENTATION_NAME)

    logger.info(
        f"Tracing initialized: {service_name} "
        f"(exporters: {', '.join(exporters) or 'none'}, sampling: {sampling_rate})"
    )
    return _tracer


def get_tracer() -> trace.Tracer:
    """
    Get the tracer used by the transform.

    Returns the initialized tracer, or a tracer from the globally installed
    provider when initialize_tracing() has not been called.
    """
    if _tracer is not None:
        return _tracer
    return trace.get_tracer(INSTRUMENTATION_NAME)


def shutdown_tracing() -> None:
    """
    Shutdown tracing and flush pending spans.

    Safe to call more than once.
    """
    global _tracer, _provider

    if _provider is None:
        return

    try:
        _provider.shutdown()
        logger.info("Tracing shutdown complete")
    finally:
        _provider = None
        _tracer = None

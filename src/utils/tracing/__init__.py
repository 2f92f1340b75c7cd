"""
Distributed tracing using OpenTelemetry.

Each transform invocation runs inside a span carrying the record topic,
partition, offset, operation code and outcome.
"""

from .context import (
    RECORD_SPAN_NAME,
    add_span_attributes,
    set_record_outcome,
    trace_operation,
    trace_record,
)
from .tracer import get_tracer, initialize_tracing, shutdown_tracing

__all__ = [
    "initialize_tracing",
    "get_tracer",
    "shutdown_tracing",
    "trace_operation",
    "trace_record",
    "set_record_outcome",
    "add_span_attributes",
    "RECORD_SPAN_NAME",
]

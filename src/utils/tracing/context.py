"""
Span helpers for the transform.

Every transform call runs inside one record span tagged with the record's
topic, partition and offset. The outcome (flattened, passthrough, dropped,
deleted) and the envelope op code are added once they are known.
"""

from contextlib import contextmanager
from typing import Any

from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

from .tracer import get_tracer

RECORD_SPAN_NAME = "extract_new_document_state"

# Types OpenTelemetry accepts as attribute values without conversion
_NATIVE_TYPES = (str, bool, int, float)


def _attributes(values: dict[str, Any]) -> dict[str, Any]:
    """Drop unset values and stringify anything OpenTelemetry cannot store."""
    return {
        key: value if isinstance(value, _NATIVE_TYPES) else str(value)
        for key, value in values.items()
        if value is not None
    }


@contextmanager
def trace_operation(
    operation_name: str,
    kind: trace.SpanKind = trace.SpanKind.INTERNAL,
    **attributes
):
    """
    Context manager for tracing operations.

    Attributes whose value is None are left off the span. An exception
    marks the span as failed with its type and is re-raised.

    Args:
        operation_name: Name of the operation being traced
        kind: Span kind (INTERNAL, CLIENT, SERVER, etc.)
        **attributes: Custom attributes to add to the span

    Yields:
        Span instance for adding custom events/attributes
    """
    tracer = get_tracer()

    with tracer.start_as_current_span(
        operation_name,
        kind=kind,
        attributes=_attributes(attributes),
        record_exception=False,
        set_status_on_exception=False,
    ) as span:
        try:
            yield span
        except Exception as e:
            span.set_attributes({"error": True, "error.type": type(e).__name__})
            span.record_exception(e)
            span.set_status(Status(StatusCode.ERROR, str(e)))
            raise


@contextmanager
def trace_record(topic: str, partition: int | None = None, offset: int | None = None):
    """
    Span around a single transform call.

    Example:
        >>> with trace_record(record.topic, record.partition, record.offset):
        ...     set_record_outcome("flattened", op="c")
    """
    with trace_operation(
        RECORD_SPAN_NAME, topic=topic, partition=partition, offset=offset
    ) as span:
        yield span


def set_record_outcome(outcome: str, op: str | None = None) -> None:
    """Tag the current record span with how the record left the transform."""
    add_span_attributes(outcome=outcome, op=op)


def add_span_attributes(**attributes):
    """
    Add attributes to the current span, skipping unset values.

    Example:
        >>> with trace_record("serverX.inventory.customers"):
        ...     add_span_attributes(field_count=12)
    """
    current_span = trace.get_current_span()
    if current_span.is_recording():
        current_span.set_attributes(_attributes(attributes))

"""
Source metadata and operation header enrichment.
"""

from collections.abc import Iterable, Mapping
from typing import Any

from .records import Header

# Prefix for fields copied from the envelope's source block
SOURCE_FIELD_PREFIX = "__"
OPERATION_HEADER_NAME = "__op"


def enrich(
    flat_document: Mapping[str, Any] | None,
    source: Mapping[str, Any],
    source_fields: Iterable[str],
) -> dict[str, Any]:
    """
    Copy selected source fields into a flattened document.

    Each configured field found in `source` is added as "__<field>";
    fields absent from `source` are skipped.

    Args:
        flat_document: Flattened document (None is treated as empty)
        source: Envelope source metadata
        source_fields: Names of the source fields to copy

    Returns:
        New flattened document with the enrichment fields appended
    """
    enriched = dict(flat_document or {})
    for name in source_fields:
        if name in source:
            enriched[f"{SOURCE_FIELD_PREFIX}{name}"] = source[name]
    return enriched


def operation_headers(headers: tuple[Header, ...], op: str) -> tuple[Header, ...]:
    """Append the operation header carrying the single-character op code."""
    return headers + (Header(OPERATION_HEADER_NAME, op.encode("utf-8")),)

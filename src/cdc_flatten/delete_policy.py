"""
Delete handling.

    none     record with a null value
    drop     no record
    rewrite  value holds only the enrichment fields plus __deleted=True

In rewrite mode every other event also gets __deleted=False, so consumers
can tell logical deletes apart with one field.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from .config import DeleteHandling, FlattenConfig
from .enricher import enrich

DELETED_FIELD = "__deleted"


@dataclass(frozen=True)
class DeleteOutcome:
    """Result of applying the delete policy to a delete event."""

    emit: bool
    value: dict[str, Any] | None = None


def handle_delete(config: FlattenConfig, source: Mapping[str, Any]) -> DeleteOutcome:
    """
    Decide what a delete event becomes.

    Args:
        config: Transform configuration
        source: Envelope source metadata

    Returns:
        DeleteOutcome; emit=False means the record is suppressed
    """
    mode = config.delete_handling

    if mode == DeleteHandling.DROP:
        return DeleteOutcome(emit=False)

    if mode == DeleteHandling.REWRITE:
        value = enrich(None, source, config.source_fields)
        value[DELETED_FIELD] = True
        return DeleteOutcome(emit=True, value=value)

    return DeleteOutcome(emit=True, value=None)


def mark_not_deleted(config: FlattenConfig, flat_document: dict[str, Any]) -> dict[str, Any]:
    """Add __deleted=False to non-delete documents in rewrite mode."""
    if config.delete_handling == DeleteHandling.REWRITE:
        flat_document[DELETED_FIELD] = False
    return flat_document

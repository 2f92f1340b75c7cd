"""
New-document-state extraction transform.

Turns CDC envelopes emitted by a document-database connector into plain
flattened documents holding only the state after the change:

    Recognizer -> State Extractor -> Flattener -> Enricher -> Delete Policy

Designed to sit in a record pipeline as a single message transform: one
record in, zero or one record out. Records that are not CDC envelopes are
returned unchanged (the same instance).

Usage:
    transform = ExtractNewDocumentState()
    transform.configure({
        "array.encoding": "document",
        "delete.handling.mode": "rewrite",
        "add.source.fields": "rs,collection",
    })
    flattened = transform.apply(record)
    transform.close()
"""

import functools
import logging
from collections.abc import Mapping
from typing import Any

from utils.metrics import TransformMetrics
from utils.tracing import add_span_attributes, set_record_outcome, trace_record

from .config import FlattenConfig
from .delete_policy import handle_delete, mark_not_deleted
from .enricher import enrich, operation_headers
from .errors import FlattenError
from .extractor import extract_event
from .flattener import flatten
from .recognizer import ENVELOPE_SCHEMA_SUFFIX, Drop, EnvelopeEvent, Passthrough, classify
from .records import Record, Schema

logger = logging.getLogger(__name__)


def build_value_schema(envelope_schema_name: str, fields: tuple[str, ...]) -> Schema:
    """
    Build the schema of a flattened value.

    The schema is named after the envelope schema without its ".Envelope"
    suffix, e.g. serverX.inventory.customers.Envelope -> serverX.inventory.customers.
    """
    name = envelope_schema_name
    if name.endswith(ENVELOPE_SCHEMA_SUFFIX):
        name = name[: -len(ENVELOPE_SCHEMA_SUFFIX)]
    return Schema(name=name, fields=fields)


class ExtractNewDocumentState:
    """
    Flatten CDC envelopes into new-document-state records.

    Holds only the frozen configuration, metric collectors and a cache of
    output schemas, so apply() may be called concurrently from several
    threads.
    """

    def __init__(
        self,
        config: FlattenConfig | None = None,
        metrics: TransformMetrics | None = None,
        schema_cache_size: int = 1024,
    ):
        """
        Initialize the transform.

        Args:
            config: Transform configuration (default: FlattenConfig())
            metrics: Metric collectors (default: registered on the global registry)
            schema_cache_size: Number of output schemas to cache
        """
        self.config = config or FlattenConfig()
        self.metrics = metrics or TransformMetrics()
        self._schema_for = functools.lru_cache(maxsize=schema_cache_size)(build_value_schema)

    def configure(self, properties: Mapping[str, Any]) -> None:
        """
        Replace the configuration from connector-style properties.

        Call once at startup, before any record is processed.

        Raises:
            ConfigurationError: On unknown properties or invalid values
        """
        self.config = FlattenConfig.from_properties(properties)

    def apply(self, record: Record) -> Record | None:
        """
        Transform a single record.

        Args:
            record: Inbound record

        Returns:
            The same record (not a CDC envelope), a new flattened record, or
            None when the record is suppressed

        Raises:
            EnvelopeContractError: If an envelope-named record lacks required fields
            UnknownOperationError: If the envelope op code is not c/u/d/r
        """
        with self.metrics.time(), trace_record(record.topic, record.partition, record.offset):
            try:
                classification = classify(record, self.config)

                if isinstance(classification, Passthrough):
                    self._finish("passthrough")
                    return record

                if isinstance(classification, Drop):
                    self._finish("dropped")
                    return None

                add_span_attributes(op=classification.op.value)
                result, outcome = self._rewrite(record, classification)

            except FlattenError as e:
                self.metrics.record_error(e)
                logger.warning(
                    f"Failed to transform record on topic {record.topic}: {e}",
                    extra={"topic": record.topic, "error_type": type(e).__name__},
                )
                raise

            self._finish(outcome)
            return result

    def _finish(self, outcome: str) -> None:
        set_record_outcome(outcome)
        self.metrics.record_outcome(outcome)

    def _rewrite(self, record: Record, event: EnvelopeEvent) -> tuple[Record | None, str]:
        config = self.config

        document = extract_event(event, topic=record.topic)
        flat = flatten(
            document,
            delimiter=config.delimiter,
            array_encoding=config.array_encoding,
        )

        headers = record.headers
        if config.operation_header:
            headers = operation_headers(headers, event.op.value)

        if flat is None:
            outcome = handle_delete(config, event.source)
            if not outcome.emit:
                logger.debug(f"Dropping delete event on topic {record.topic}")
                return None, "dropped"
            if outcome.value is None:
                return record.new_record(value=None, value_schema=None, headers=headers), "deleted"
            value = outcome.value
            result_outcome = "deleted"
        else:
            value = mark_not_deleted(config, enrich(flat, event.source, config.source_fields))
            result_outcome = "flattened"

        add_span_attributes(field_count=len(value))
        value_schema = self._schema_for(record.value_schema.name, tuple(value))
        return record.new_record(value=value, value_schema=value_schema, headers=headers), result_outcome

    def close(self) -> None:
        """Release the schema cache. Safe to call more than once."""
        self._schema_for.cache_clear()

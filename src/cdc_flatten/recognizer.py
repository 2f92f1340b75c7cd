"""
Envelope recognition.

Every inbound record is classified exactly once into one of three variants:

- Passthrough: not a CDC envelope (heartbeat, schemaless, unrelated schema,
  or a tombstone that is kept); the record is emitted unchanged.
- Drop: a tombstone that the configuration says to suppress.
- EnvelopeEvent: a parsed CDC envelope ready for state extraction.

Records whose value schema is named like an envelope but lacks required
fields raise EnvelopeContractError instead of being skipped.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union

from .config import FlattenConfig
from .documents import decode_document
from .errors import EnvelopeContractError, UnknownOperationError
from .patch import Patch
from .records import Record

logger = logging.getLogger(__name__)

ENVELOPE_SCHEMA_SUFFIX = ".Envelope"
HEARTBEAT_SCHEMA_NAME = "io.debezium.connector.common.Heartbeat"

OPERATION = "op"
BEFORE = "before"
AFTER = "after"
PATCH = "patch"
SOURCE = "source"
TIMESTAMP = "ts_ms"


class Operation(str, Enum):
    """Envelope operation codes."""

    CREATE = "c"
    UPDATE = "u"
    DELETE = "d"
    READ = "r"


@dataclass(frozen=True)
class Passthrough:
    """Emit the record unchanged."""

    reason: str


@dataclass(frozen=True)
class Drop:
    """Suppress the record."""

    reason: str


@dataclass(frozen=True)
class EnvelopeEvent:
    """Parsed CDC envelope."""

    op: Operation
    source: Mapping[str, Any] = field(default_factory=dict)
    ts_ms: int | None = None
    before: dict[str, Any] | None = None
    after: dict[str, Any] | None = None
    patch: Patch | None = None


Classification = Union[Passthrough, Drop, EnvelopeEvent]


def parse_operation(code: Any, topic: str | None = None) -> Operation:
    """
    Parse an envelope op code.

    Raises:
        EnvelopeContractError: If the op value is missing
        UnknownOperationError: If the op code is not c/u/d/r
    """
    if code is None or code == "":
        raise EnvelopeContractError(
            "Envelope has no operation type", field_name=OPERATION, topic=topic
        )
    try:
        return Operation(code)
    except ValueError:
        raise UnknownOperationError(str(code), topic=topic) from None


def _required_fields(op: Operation, fields: tuple[str, ...]) -> list[str]:
    if op in (Operation.CREATE, Operation.READ):
        return [AFTER]
    if op == Operation.UPDATE and PATCH not in fields:
        return [AFTER]
    return []


def _check_field(record: Record, field_name: str) -> None:
    if not record.value_schema.has_field(field_name):
        raise EnvelopeContractError(
            f"Schema '{record.value_schema.name}' of record on topic "
            f"'{record.topic}' has no field '{field_name}'",
            field_name=field_name,
            topic=record.topic,
        )


def parse_envelope(record: Record) -> EnvelopeEvent:
    """
    Read the envelope fields of a record with an envelope-named schema.

    Args:
        record: Record whose value schema name ends with the envelope suffix

    Returns:
        Parsed EnvelopeEvent

    Raises:
        EnvelopeContractError: If a required field is missing from the schema
        UnknownOperationError: If the op code is not recognized
    """
    value = record.value
    if not isinstance(value, Mapping):
        raise EnvelopeContractError(
            f"Envelope value on topic '{record.topic}' is not a struct",
            topic=record.topic,
        )

    for field_name in (OPERATION, SOURCE, TIMESTAMP):
        _check_field(record, field_name)

    op = parse_operation(value.get(OPERATION), topic=record.topic)

    for field_name in _required_fields(op, record.value_schema.fields):
        _check_field(record, field_name)

    source = decode_document(value.get(SOURCE), SOURCE, topic=record.topic) or {}

    return EnvelopeEvent(
        op=op,
        source=source,
        ts_ms=value.get(TIMESTAMP),
        before=decode_document(value.get(BEFORE), BEFORE, topic=record.topic),
        after=decode_document(value.get(AFTER), AFTER, topic=record.topic),
        patch=Patch.parse(value.get(PATCH), topic=record.topic),
    )


def classify(record: Record, config: FlattenConfig) -> Classification:
    """
    Classify a record.

    Args:
        record: Inbound record
        config: Transform configuration

    Returns:
        Passthrough, Drop or EnvelopeEvent
    """
    if record.value is None:
        if config.drop_tombstones:
            logger.debug(f"Dropping tombstone on topic {record.topic}")
            return Drop("tombstone")
        return Passthrough("tombstone")

    schema = record.value_schema
    if schema is None or schema.name is None:
        logger.debug(f"Record on topic {record.topic} has no value schema name, passing through")
        return Passthrough("no_schema")

    if schema.name == HEARTBEAT_SCHEMA_NAME:
        return Passthrough("heartbeat")

    if not schema.name.endswith(ENVELOPE_SCHEMA_SUFFIX):
        logger.debug(
            f"Schema '{schema.name}' on topic {record.topic} is not a CDC envelope, passing through"
        )
        return Passthrough("not_envelope")

    return parse_envelope(record)

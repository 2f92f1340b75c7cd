"""
Transport-level record model.

A Record mirrors what the host pipeline hands to a single message transform:
an optional key and value, each with an optional schema, plus topic,
partition/offset metadata and ordered headers. Records are immutable; the
transform either returns the same instance or builds a new one with
`Record.new_record`.
"""

import dataclasses
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class Schema:
    """Named record schema with ordered field names."""

    name: str | None = None
    fields: tuple[str, ...] = ()

    def has_field(self, field_name: str) -> bool:
        """Check whether the schema declares a field."""
        return field_name in self.fields


@dataclass(frozen=True)
class Header:
    """Single record header."""

    name: str
    value: bytes


@dataclass(frozen=True)
class Record:
    """Immutable transport record."""

    topic: str
    value: Any = None
    value_schema: Schema | None = None
    key: Any = None
    key_schema: Schema | None = None
    partition: int | None = None
    offset: int | None = None
    headers: tuple[Header, ...] = field(default_factory=tuple)

    def new_record(self, **changes: Any) -> "Record":
        """
        Build a new record with some attributes replaced.

        Args:
            **changes: Attributes to replace (value, value_schema, headers, ...)

        Returns:
            New Record; attributes not named are carried over
        """
        return dataclasses.replace(self, **changes)

    def header_values(self, name: str) -> list[bytes]:
        """Get all values of the headers with the given name."""
        return [h.value for h in self.headers if h.name == name]


def _schema_from_dict(data: Mapping[str, Any] | None) -> Schema | None:
    if data is None:
        return None
    return Schema(name=data.get("name"), fields=tuple(data.get("fields") or ()))


def _schema_to_dict(schema: Schema | None) -> dict[str, Any] | None:
    if schema is None:
        return None
    return {"name": schema.name, "fields": list(schema.fields)}


def _headers_from_list(items: Iterable[Mapping[str, Any]]) -> tuple[Header, ...]:
    headers = []
    for item in items:
        value = item.get("value")
        if isinstance(value, str):
            value = value.encode("utf-8")
        headers.append(Header(name=item["name"], value=value or b""))
    return tuple(headers)


def record_from_dict(data: Mapping[str, Any]) -> Record:
    """
    Build a Record from its JSON-compatible representation.

    Expected shape (key and value follow the schema/payload convention of
    JSON-serialised connector records; either may be null):

        {
            "topic": "serverX.inventory.customers",
            "partition": 0,
            "offset": 42,
            "key": {"schema": {...}, "payload": {...}},
            "value": {"schema": {"name": "...", "fields": [...]}, "payload": {...}},
            "headers": [{"name": "...", "value": "..."}]
        }

    Args:
        data: Decoded JSON object

    Returns:
        Record instance

    Raises:
        KeyError: If the topic is missing
    """
    key_part = data.get("key")
    value_part = data.get("value")

    key_schema, key = None, None
    if key_part is not None:
        key_schema = _schema_from_dict(key_part.get("schema"))
        key = key_part.get("payload")

    value_schema, value = None, None
    if value_part is not None:
        value_schema = _schema_from_dict(value_part.get("schema"))
        value = value_part.get("payload")

    return Record(
        topic=data["topic"],
        partition=data.get("partition"),
        offset=data.get("offset"),
        key_schema=key_schema,
        key=key,
        value_schema=value_schema,
        value=value,
        headers=_headers_from_list(data.get("headers") or ()),
    )


def record_to_dict(record: Record) -> dict[str, Any]:
    """
    Convert a Record into its JSON-compatible representation.

    Header values are decoded as UTF-8 text. Non-mapping payloads of
    passed-through records are written unchanged, and a null value keeps
    its schema when it has one.
    """
    key_part = None
    if record.key is not None or record.key_schema is not None:
        key_part = {"schema": _schema_to_dict(record.key_schema), "payload": record.key}

    value_part = None
    if record.value is not None or record.value_schema is not None:
        payload = record.value
        if isinstance(payload, Mapping):
            payload = dict(payload)
        value_part = {"schema": _schema_to_dict(record.value_schema), "payload": payload}

    return {
        "topic": record.topic,
        "partition": record.partition,
        "offset": record.offset,
        "key": key_part,
        "value": value_part,
        "headers": [
            {"name": h.name, "value": h.value.decode("utf-8", errors="replace")}
            for h in record.headers
        ],
    }

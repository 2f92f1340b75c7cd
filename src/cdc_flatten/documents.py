"""
Document decoding for envelope fields.

Document-database connectors emit `before`, `after` and `patch` either as
nested mappings or as extended-JSON text. Both forms are decoded into plain
dicts; extended-JSON scalar wrappers such as {"$oid": "..."} or
{"$numberLong": "42"} are unwrapped into ordinary Python scalars.
"""

import json
from collections.abc import Mapping
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any

from .errors import EnvelopeContractError

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _date_to_millis(value: Any) -> Any:
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return (parsed - _EPOCH) // timedelta(milliseconds=1)
    return value


_SCALAR_WRAPPERS = {
    "$oid": str,
    "$symbol": str,
    "$numberInt": int,
    "$numberLong": int,
    "$numberDouble": float,
    "$numberDecimal": Decimal,
    "$date": _date_to_millis,
}


def unwrap_extended_json(obj: dict[str, Any]) -> Any:
    """
    Unwrap a single extended-JSON scalar wrapper.

    Used as a json object_hook, so nested wrappers are already unwrapped
    by the time the outer object is seen.

    Examples:
        {"$oid": "5d505646cf6d4fe581014ab2"} -> "5d505646cf6d4fe581014ab2"
        {"$numberLong": "42"} -> 42
        {"$date": 1565787098802} -> 1565787098802
    """
    if len(obj) == 1:
        (name, value), = obj.items()
        converter = _SCALAR_WRAPPERS.get(name)
        if converter is not None:
            return converter(value)
    return obj


def _unwrap_nested(value: Any) -> Any:
    if isinstance(value, Mapping):
        return unwrap_extended_json({k: _unwrap_nested(v) for k, v in value.items()})
    if isinstance(value, list):
        return [_unwrap_nested(v) for v in value]
    return value


def decode_document(
    value: Any,
    field_name: str,
    topic: str | None = None,
) -> dict[str, Any] | None:
    """
    Decode an envelope document field.

    Args:
        value: Field value (None, mapping or extended-JSON text)
        field_name: Envelope field the value came from, for error messages
        topic: Record topic, for error messages

    Returns:
        Decoded document, or None when the field is null

    Raises:
        EnvelopeContractError: If the text is not a JSON object
    """
    if value is None:
        return None

    try:
        if isinstance(value, (str, bytes)):
            decoded = json.loads(value, object_hook=unwrap_extended_json)
        else:
            decoded = _unwrap_nested(value)
    except (ValueError, TypeError, ArithmeticError) as e:
        raise EnvelopeContractError(
            f"Field '{field_name}' is not a valid document: {e}",
            field_name=field_name,
            topic=topic,
        ) from e

    if not isinstance(decoded, dict):
        raise EnvelopeContractError(
            f"Field '{field_name}' must be a document, got {type(decoded).__name__}",
            field_name=field_name,
            topic=topic,
        )
    return decoded

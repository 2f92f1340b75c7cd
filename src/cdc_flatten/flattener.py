"""
Nested document flattening.

Walks a document depth-first in insertion order and joins nested keys with
a delimiter:

    {"a": 1, "b": {"c": 2}}  ->  {"a": 1, "b.c": 2}

Lists are emitted as-is under ArrayEncoding.ARRAY. Under
ArrayEncoding.DOCUMENT each list becomes an index-keyed mapping first, so
every element is addressable:

    {"a": [1, 2, 3]}  ->  {"a.0": 1, "a.1": 2, "a.2": 3}
"""

from collections.abc import Mapping
from typing import Any

from .config import ArrayEncoding


def _join(prefix: str, key: Any, delimiter: str) -> str:
    return f"{prefix}{delimiter}{key}" if prefix else str(key)


def _array_to_document(values: list[Any]) -> dict[str, Any]:
    return {str(index): value for index, value in enumerate(values)}


def _walk(
    value: Mapping[str, Any],
    prefix: str,
    delimiter: str,
    array_encoding: ArrayEncoding,
    out: dict[str, Any],
) -> None:
    for key, child in value.items():
        path = _join(prefix, key, delimiter)

        if isinstance(child, (list, tuple)) and array_encoding == ArrayEncoding.DOCUMENT:
            child = _array_to_document(list(child))

        if isinstance(child, Mapping):
            _walk(child, path, delimiter, array_encoding, out)
        elif isinstance(child, tuple):
            out[path] = list(child)
        else:
            out[path] = child


def flatten(
    document: Mapping[str, Any] | None,
    prefix: str = "",
    delimiter: str = ".",
    array_encoding: ArrayEncoding = ArrayEncoding.ARRAY,
) -> dict[str, Any] | None:
    """
    Flatten a nested document into a single-level mapping.

    Args:
        document: Nested document, or None for deletes
        prefix: Path prefix for every emitted key ("" at the top level)
        delimiter: Separator placed between path segments
        array_encoding: How to represent list values

    Returns:
        Flattened document in depth-first insertion order, or None when the
        document is None (a delete has no value, which is not the same as an
        empty document)
    """
    if document is None:
        return None

    flat: dict[str, Any] = {}
    _walk(document, prefix, delimiter, ArrayEncoding(array_encoding), flat)
    return flat

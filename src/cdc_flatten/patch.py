"""
Partial-update (patch) representation.

Update events from document databases may carry only a delta instead of the
full document. Three shapes are understood:

    {"$set": {...}, "$unset": {"field": true}}            oplog update
    {"updatedFields": {...}, "removedFields": [...]}       change-stream updateDescription
    {"set": {...}, "removed": [...]}                       normalised form

A patch without any of these operator keys is an oplog full-document
replacement and is used verbatim.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from .documents import decode_document
from .errors import EnvelopeContractError

_OPERATOR_STYLES = (
    ("$set", "$unset"),
    ("updatedFields", "removedFields"),
    ("set", "removed"),
)


def _expand_paths(fragment: Mapping[str, Any]) -> dict[str, Any]:
    """Expand dotted field paths ("a.b": 1) into nested mappings ({"a": {"b": 1}})."""
    expanded: dict[str, Any] = {}
    for path, value in fragment.items():
        parts = str(path).split(".")
        target = expanded
        for part in parts[:-1]:
            child = target.get(part)
            if not isinstance(child, dict):
                child = {}
                target[part] = child
            target = child
        if isinstance(value, Mapping):
            nested = _expand_paths(value)
            existing = target.get(parts[-1])
            if isinstance(existing, dict):
                existing.update(nested)
            else:
                target[parts[-1]] = nested
        else:
            target[parts[-1]] = value
    return expanded


def _removed_paths(removed: Any, topic: str | None) -> tuple[str, ...]:
    if removed is None:
        return ()
    if isinstance(removed, str):
        return (removed,)
    if isinstance(removed, (Mapping, list, tuple)):
        # $unset style is a mapping: {"field": true}
        return tuple(str(name) for name in removed)
    raise EnvelopeContractError(
        f"Patch removed fields must be a name, list or mapping, got {type(removed).__name__}",
        field_name="patch",
        topic=topic,
    )


def _set_fragment(fragment: Any, topic: str | None) -> Mapping[str, Any]:
    if fragment is None:
        return {}
    if not isinstance(fragment, Mapping):
        raise EnvelopeContractError(
            f"Patch set fields must be a document, got {type(fragment).__name__}",
            field_name="patch",
            topic=topic,
        )
    return fragment


def _remove_path(document: dict[str, Any], path: str) -> None:
    parts = path.split(".")
    target: Any = document
    for part in parts[:-1]:
        target = target.get(part) if isinstance(target, dict) else None
        if target is None:
            return
    if isinstance(target, dict):
        target.pop(parts[-1], None)


@dataclass(frozen=True)
class Patch:
    """Merge fragment plus the list of removed field paths."""

    fragment: Mapping[str, Any] = field(default_factory=dict)
    removed: tuple[str, ...] = ()
    full_document: bool = False

    @classmethod
    def parse(cls, value: Any, topic: str | None = None) -> "Patch | None":
        """
        Parse a raw patch field.

        Args:
            value: Patch field value (None, mapping or JSON text)
            topic: Record topic, for error messages

        Returns:
            Patch, or None when the envelope carries no patch

        Raises:
            EnvelopeContractError: If the value is not a JSON document, or its
                operator fields have the wrong shape
        """
        document = decode_document(value, "patch", topic=topic)
        if document is None:
            return None

        for set_key, removed_key in _OPERATOR_STYLES:
            if set_key in document or removed_key in document:
                return cls(
                    fragment=_expand_paths(_set_fragment(document.get(set_key), topic)),
                    removed=_removed_paths(document.get(removed_key), topic),
                )

        return cls(fragment=document, full_document=True)

    def apply(self) -> dict[str, Any]:
        """
        Build the partial document this patch describes.

        No earlier state is available, so the result holds only the fields
        the patch sets; fields the patch removes are left out.
        """
        if self.full_document:
            return dict(self.fragment)

        document = _expand_paths(self.fragment)
        for path in self.removed:
            _remove_path(document, path)
        return document

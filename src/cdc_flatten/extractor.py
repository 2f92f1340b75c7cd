"""
New-document-state extraction.

Combines the `after`, `before` and `patch` fields of an envelope into the
document state after the operation:

    c, r            after
    u + after       after (authoritative, before is ignored)
    u + patch only  patch fragment minus removed paths
    d               None

Known limitation: no state is retained between records, so a patch-only
update yields a partial view holding just the fields the patch sets. Fields
the source document had but the patch does not mention are absent from the
result.
"""

import logging
from collections.abc import Mapping
from typing import Any

from .errors import EnvelopeContractError
from .patch import Patch
from .recognizer import EnvelopeEvent, Operation, parse_operation

logger = logging.getLogger(__name__)


def extract(
    op: Operation | str,
    before: Mapping[str, Any] | None,
    after: Mapping[str, Any] | None,
    patch: Patch | None,
    topic: str | None = None,
) -> dict[str, Any] | None:
    """
    Compute the new document state.

    Args:
        op: Operation code
        before: Document before the change (unused except for deletes)
        after: Full document after the change
        patch: Partial update, for patch-style updates
        topic: Record topic, for error messages

    Returns:
        New document state, or None for deletes

    Raises:
        UnknownOperationError: If op is not c/u/d/r
        EnvelopeContractError: If an update carries neither after nor patch
    """
    op = parse_operation(op.value if isinstance(op, Operation) else op, topic=topic)

    if op == Operation.DELETE:
        return None

    if op in (Operation.CREATE, Operation.READ):
        if after is None:
            raise EnvelopeContractError(
                f"'{op.value}' event has no 'after' document", field_name="after", topic=topic
            )
        return dict(after)

    if after is not None:
        return dict(after)

    if patch is not None:
        logger.debug(f"Building partial document from patch on topic {topic}")
        return patch.apply()

    raise EnvelopeContractError(
        "Update event has neither 'after' nor 'patch'", field_name="patch", topic=topic
    )


def extract_event(event: EnvelopeEvent, topic: str | None = None) -> dict[str, Any] | None:
    """Compute the new document state of a parsed envelope."""
    return extract(event.op, event.before, event.after, event.patch, topic=topic)

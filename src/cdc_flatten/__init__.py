"""
New-document-state extraction for CDC envelopes.

Rewrites change events from a document-database replication connector into
flattened documents holding only the state after each change, for sinks
that expect plain documents rather than CDC envelopes.
"""

from .config import ArrayEncoding, DeleteHandling, FlattenConfig
from .errors import (
    ConfigurationError,
    EnvelopeContractError,
    FlattenError,
    UnknownOperationError,
)
from .extractor import extract
from .flattener import flatten
from .recognizer import Drop, EnvelopeEvent, Operation, Passthrough, classify
from .records import Header, Record, Schema, record_from_dict, record_to_dict
from .transform import ExtractNewDocumentState

__version__ = "1.0.0"

__all__ = [
    "ExtractNewDocumentState",
    "FlattenConfig",
    "ArrayEncoding",
    "DeleteHandling",
    "Record",
    "Schema",
    "Header",
    "record_from_dict",
    "record_to_dict",
    "classify",
    "extract",
    "flatten",
    "Operation",
    "Passthrough",
    "Drop",
    "EnvelopeEvent",
    "FlattenError",
    "ConfigurationError",
    "EnvelopeContractError",
    "UnknownOperationError",
]

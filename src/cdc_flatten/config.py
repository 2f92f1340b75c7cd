"""
Transform configuration.

Configuration is parsed and validated once, then frozen. The same
FlattenConfig instance is passed to every component call, so concurrent
invocations of the transform share nothing mutable.

Recognized properties:
    array.encoding            array | document (default: array)
    flatten.struct            always true
    flatten.struct.delimiter  non-empty string (default: ".")
    delete.handling.mode      none | drop | rewrite (default: drop)
    drop.tombstones           bool (default: true)
    operation.header          bool (default: false)
    add.source.fields         comma-separated source field names
"""

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

import jsonschema

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

ARRAY_ENCODING = "array.encoding"
FLATTEN_STRUCT = "flatten.struct"
DELIMITER = "flatten.struct.delimiter"
HANDLE_DELETES = "delete.handling.mode"
DROP_TOMBSTONES = "drop.tombstones"
OPERATION_HEADER = "operation.header"
ADD_SOURCE_FIELDS = "add.source.fields"

BOOLEAN_PROPERTIES = (FLATTEN_STRUCT, DROP_TOMBSTONES, OPERATION_HEADER)

_TRUE_VALUES = ("true", "1", "yes")
_FALSE_VALUES = ("false", "0", "no")


class ArrayEncoding(str, Enum):
    """How list values are represented in the flattened document."""

    ARRAY = "array"
    DOCUMENT = "document"


class DeleteHandling(str, Enum):
    """What a delete event turns into."""

    NONE = "none"
    DROP = "drop"
    REWRITE = "rewrite"


# JSON Schema for the normalised property mapping
CONFIG_SCHEMA: dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "title": "ExtractNewDocumentState configuration",
    "type": "object",
    "properties": {
        ARRAY_ENCODING: {"type": "string", "enum": [e.value for e in ArrayEncoding]},
        FLATTEN_STRUCT: {"type": "boolean", "const": True},
        DELIMITER: {"type": "string", "minLength": 1},
        HANDLE_DELETES: {"type": "string", "enum": [e.value for e in DeleteHandling]},
        DROP_TOMBSTONES: {"type": "boolean"},
        OPERATION_HEADER: {"type": "boolean"},
        ADD_SOURCE_FIELDS: {"type": "string"},
    },
    "additionalProperties": False,
}

_VALIDATOR = jsonschema.Draft7Validator(CONFIG_SCHEMA)


def _to_bool(value: Any) -> Any:
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_VALUES:
            return True
        if lowered in _FALSE_VALUES:
            return False
    return value


def _normalize(properties: Mapping[str, Any]) -> dict[str, Any]:
    normalized: dict[str, Any] = {}
    for name, value in properties.items():
        if name in BOOLEAN_PROPERTIES:
            value = _to_bool(value)
        elif isinstance(value, str) and name != DELIMITER:
            value = value.strip()
        normalized[name] = value
    return normalized


def _raise_first_error(properties: Mapping[str, Any]) -> None:
    errors = sorted(_VALIDATOR.iter_errors(properties), key=lambda e: list(e.path))
    if not errors:
        return

    error = errors[0]
    if error.validator == "additionalProperties":
        unknown = sorted(set(properties) - set(CONFIG_SCHEMA["properties"]))
        raise ConfigurationError(
            f"Unknown configuration propert{'y' if len(unknown) == 1 else 'ies'}: "
            f"{', '.join(unknown)}",
            property_name=unknown[0] if unknown else None,
        )

    property_name = str(error.path[0]) if error.path else None
    if property_name == FLATTEN_STRUCT:
        message = "flatten.struct cannot be disabled"
    else:
        message = f"Invalid value for {property_name}: {error.message}"
    raise ConfigurationError(message, property_name=property_name)


@dataclass(frozen=True)
class FlattenConfig:
    """Immutable transform configuration."""

    array_encoding: ArrayEncoding = ArrayEncoding.ARRAY
    delimiter: str = "."
    delete_handling: DeleteHandling = DeleteHandling.DROP
    drop_tombstones: bool = True
    operation_header: bool = False
    source_fields: tuple[str, ...] = ()

    def __post_init__(self):
        if not self.delimiter:
            raise ConfigurationError("Delimiter must not be empty", property_name=DELIMITER)

    @classmethod
    def from_properties(cls, properties: Mapping[str, Any]) -> "FlattenConfig":
        """
        Build configuration from connector-style properties.

        Args:
            properties: Mapping of property name -> value (strings or native types)

        Returns:
            Validated FlattenConfig

        Raises:
            ConfigurationError: On unknown properties or invalid values
        """
        normalized = _normalize(properties)
        _raise_first_error(normalized)

        source_fields = tuple(
            name.strip()
            for name in normalized.get(ADD_SOURCE_FIELDS, "").split(",")
            if name.strip()
        )

        config = cls(
            array_encoding=ArrayEncoding(normalized.get(ARRAY_ENCODING, ArrayEncoding.ARRAY.value)),
            delimiter=normalized.get(DELIMITER, "."),
            delete_handling=DeleteHandling(
                normalized.get(HANDLE_DELETES, DeleteHandling.DROP.value)
            ),
            drop_tombstones=normalized.get(DROP_TOMBSTONES, True),
            operation_header=normalized.get(OPERATION_HEADER, False),
            source_fields=source_fields,
        )

        logger.info(
            f"Configured transform: array.encoding={config.array_encoding.value}, "
            f"delimiter={config.delimiter!r}, "
            f"delete.handling.mode={config.delete_handling.value}, "
            f"drop.tombstones={config.drop_tombstones}, "
            f"operation.header={config.operation_header}, "
            f"add.source.fields={','.join(config.source_fields) or 'none'}"
        )
        return config

    @classmethod
    def from_env(
        cls,
        prefix: str = "FLATTEN_",
        environ: Mapping[str, str] | None = None,
    ) -> "FlattenConfig":
        """
        Build configuration from environment variables

        Each property maps to PREFIX + NAME with dots replaced by underscores,
        e.g. delete.handling.mode -> FLATTEN_DELETE_HANDLING_MODE.

        Args:
            prefix: Environment variable prefix
            environ: Environment mapping (default: os.environ)

        Returns:
            Validated FlattenConfig
        """
        environ = os.environ if environ is None else environ
        properties = {}
        for name in CONFIG_SCHEMA["properties"]:
            env_name = prefix + name.upper().replace(".", "_")
            if env_name in environ:
                properties[name] = environ[env_name]
        return cls.from_properties(properties)

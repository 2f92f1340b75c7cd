"""
Exception types raised by the new-document-state transform.

Records that simply are not CDC envelopes (heartbeats, tombstones, unrelated
messages) never raise; these exceptions signal configuration mistakes or
envelope-shaped records that break the envelope contract.
"""


class FlattenError(Exception):
    """Base class for all transform errors."""

    def __init__(self, message: str, topic: str | None = None):
        super().__init__(message)
        self.topic = topic


class ConfigurationError(FlattenError):
    """Invalid or unsupported transform configuration."""

    def __init__(self, message: str, property_name: str | None = None):
        super().__init__(message)
        self.property_name = property_name


class EnvelopeContractError(FlattenError):
    """An envelope-named record lacks a field the envelope contract requires."""

    def __init__(
        self,
        message: str,
        field_name: str | None = None,
        topic: str | None = None,
    ):
        super().__init__(message, topic=topic)
        self.field_name = field_name


class UnknownOperationError(FlattenError):
    """The envelope carries an `op` code outside c/u/d/r."""

    def __init__(self, op: str, topic: str | None = None):
        super().__init__(f"Unknown operation type: {op!r}", topic=topic)
        self.op = op

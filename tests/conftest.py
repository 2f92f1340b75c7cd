"""
Pytest configuration and fixtures for transform tests.

Provides record builders for CDC envelopes, heartbeats and tombstones,
and an isolated Prometheus registry per test.
"""

import logging
from typing import Any, Callable

import pytest
from prometheus_client import CollectorRegistry

from cdc_flatten import ExtractNewDocumentState, FlattenConfig, Record, Schema
from utils.metrics import TransformMetrics

SERVER_NAME = "serverX"
TOPIC = f"{SERVER_NAME}.inventory.customers"
ENVELOPE_SCHEMA_NAME = f"{TOPIC}.Envelope"
ENVELOPE_FIELDS = ("after", "patch", "source", "op", "ts_ms")

SOURCE = {
    "version": "1.0.0",
    "connector": "mongodb",
    "name": SERVER_NAME,
    "ts_ms": 1565787098000,
    "snapshot": "false",
    "db": "inventory",
    "rs": "rs0",
    "collection": "customers",
    "ord": 31,
}


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "contract: mark test as contract test")
    config.addinivalue_line("markers", "property: mark test as property-based test")


def envelope_record(
    op: str,
    after: Any = None,
    patch: Any = None,
    before: Any = None,
    source: dict[str, Any] | None = None,
    fields: tuple[str, ...] = ENVELOPE_FIELDS,
    schema_name: str = ENVELOPE_SCHEMA_NAME,
    key: Any = None,
) -> Record:
    """Build a CDC envelope record."""
    value = {
        "op": op,
        "before": before,
        "after": after,
        "patch": patch,
        "source": dict(SOURCE if source is None else source),
        "ts_ms": 1565787098802,
    }
    value = {name: value[name] for name in value if name in fields}
    return Record(
        topic=TOPIC,
        partition=0,
        offset=7,
        key_schema=Schema(name=f"{TOPIC}.Key", fields=("id",)),
        key=key if key is not None else {"id": "1004"},
        value_schema=Schema(name=schema_name, fields=fields),
        value=value,
    )


@pytest.fixture
def registry() -> CollectorRegistry:
    """Isolated Prometheus registry."""
    return CollectorRegistry()


@pytest.fixture
def metrics(registry: CollectorRegistry) -> TransformMetrics:
    """Transform metrics bound to the isolated registry."""
    return TransformMetrics(registry=registry)


@pytest.fixture
def make_transform(metrics: TransformMetrics) -> Callable[..., ExtractNewDocumentState]:
    """Factory building a configured transform from properties."""
    created = []

    def factory(**properties: Any) -> ExtractNewDocumentState:
        config = FlattenConfig.from_properties(
            {name.replace("_", "."): value for name, value in properties.items()}
        )
        transform = ExtractNewDocumentState(config, metrics=metrics)
        created.append(transform)
        return transform

    yield factory

    for transform in created:
        transform.close()


@pytest.fixture
def transform(make_transform: Callable[..., ExtractNewDocumentState]) -> ExtractNewDocumentState:
    """Transform with array encoding and default settings."""
    return make_transform(array_encoding="array")


@pytest.fixture
def envelope() -> Callable[..., Record]:
    """Builder for CDC envelope records (see envelope_record)."""
    return envelope_record


@pytest.fixture
def source() -> dict[str, Any]:
    """Source metadata block used by envelope records."""
    return dict(SOURCE)


@pytest.fixture
def restore_root_logger() -> logging.Logger:
    """Put the root logger back the way the test found it."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield root
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)

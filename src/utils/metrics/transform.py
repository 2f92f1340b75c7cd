"""
Metrics for the new-document-state transform.

Tracks how records leave the transform (flattened, passed through, dropped,
deleted), contract failures and per-record latency.
"""

from prometheus_client import REGISTRY, CollectorRegistry, Counter, Histogram

from .registry import get_or_create_metric

OUTCOMES = ("flattened", "passthrough", "dropped", "deleted")


class TransformMetrics:
    """
    Metrics for record transformation

    Metrics are registered once per registry; several transforms using the
    same registry share the same collectors.
    """

    def __init__(self, registry: CollectorRegistry | None = None):
        """
        Initialize transform metrics

        Args:
            registry: Custom Prometheus registry (default: global REGISTRY)
        """
        self.registry = registry or REGISTRY

        self.records_processed_total = get_or_create_metric(
            lambda: Counter(
                "records_processed_total",
                "Total records handled by the transform",
                ["outcome"],
                registry=self.registry,
            ),
            "records_processed_total",
            self.registry,
        )

        self.transform_errors_total = get_or_create_metric(
            lambda: Counter(
                "transform_errors_total",
                "Records that failed the envelope contract",
                ["error_type"],
                registry=self.registry,
            ),
            "transform_errors_total",
            self.registry,
        )

        self.transform_seconds = get_or_create_metric(
            lambda: Histogram(
                "transform_seconds",
                "Time to transform a single record",
                buckets=[0.00005, 0.0001, 0.0005, 0.001, 0.005, 0.01, 0.05, 0.1],
                registry=self.registry,
            ),
            "transform_seconds",
            self.registry,
        )

    def record_outcome(self, outcome: str) -> None:
        """
        Count a record leaving the transform

        Args:
            outcome: One of flattened, passthrough, dropped, deleted
        """
        if outcome not in OUTCOMES:
            raise ValueError(f"Unknown outcome: {outcome}")
        self.records_processed_total.labels(outcome=outcome).inc()

    def record_error(self, error: Exception) -> None:
        """Count a failed record by exception type"""
        self.transform_errors_total.labels(error_type=type(error).__name__).inc()

    def time(self):
        """Context manager timing one transform call"""
        return self.transform_seconds.time()

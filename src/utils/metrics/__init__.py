"""
Prometheus metrics for the transform

Usage:
    from utils.metrics import MetricsPublisher, TransformMetrics

    metrics = TransformMetrics()
    MetricsPublisher(port=9091).start()
"""

from .publisher import MetricsPublisher
from .registry import get_or_create_metric
from .transform import TransformMetrics

__all__ = [
    "MetricsPublisher",
    "TransformMetrics",
    "get_or_create_metric",
]

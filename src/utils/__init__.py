"""
Ambient utilities for the transform

Provides:
- logging: Structured and console log formatting
- metrics: Prometheus metrics for transformed records
- tracing: OpenTelemetry spans around each transform call
"""

__version__ = "1.0.0"
__all__ = ["logging", "metrics", "tracing"]

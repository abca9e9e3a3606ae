"""
Observability module: Metrics and structured logging.
"""

from zenith.observability.metrics import MetricsCollector, Counter, Gauge, Histogram
from zenith.observability.logging import StructuredLogger, LogLevel, setup_logging

__all__ = [
    "MetricsCollector",
    "Counter",
    "Gauge",
    "Histogram",
    "StructuredLogger",
    "LogLevel",
    "setup_logging",
]

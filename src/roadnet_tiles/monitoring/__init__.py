"""
Monitoring and Observability

Structured logging setup and Prometheus-backed run metrics.
"""

from .logging_config import configure_logging
from .metrics import MetricsCollector

__all__ = [
    "configure_logging",
    "MetricsCollector",
]

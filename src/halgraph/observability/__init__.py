"""Observability - Metrics and logging."""

from .logger import LogContext, configure_logging, current_context
from .metrics import InMemoryBackend, MetricsCollector, get_global_collector

__all__ = [
    "MetricsCollector",
    "InMemoryBackend",
    "get_global_collector",
    "configure_logging",
    "current_context",
    "LogContext",
]

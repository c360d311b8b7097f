"""Observability module for the SQL cache driver.

This module provides:
- Prometheus metrics collection
- Structured JSON logging

Example:
    >>> from sqlcache.observability import configure_logging, metrics
    >>>
    >>> configure_logging(level="INFO", log_format="json")
    >>> metrics.increment_operation("fetch", "success", "chi_Default")
"""

from sqlcache.observability.logging import (
    JSONFormatter,
    SensitiveDataFilter,
    TextFormatter,
    configure_logging,
    configure_logging_from_settings,
    get_logger,
)
from sqlcache.observability.metrics import MetricsCollector, metrics

__all__ = [
    # Metrics
    "MetricsCollector",
    "metrics",
    # Logging
    "configure_logging",
    "configure_logging_from_settings",
    "get_logger",
    "JSONFormatter",
    "TextFormatter",
    "SensitiveDataFilter",
]

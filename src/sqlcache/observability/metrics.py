"""Prometheus metrics collector for the SQL cache driver.

This module implements metrics collection using prometheus_client, tracking
cache operations, fetch hit ratios, store fallbacks and statement reuse.
"""

from prometheus_client import Counter, Histogram


class MetricsCollector:
    """Centralized metrics collector using Prometheus client.

    Metrics are registered once per process; every driver instance shares
    the same collector and distinguishes itself with the ``table`` label.

    Example:
        >>> metrics = MetricsCollector()
        >>> metrics.increment_operation("fetch", "success", "chi_Default")
        >>> metrics.observe_operation_duration("fetch", 0.002)
    """

    _instance: "MetricsCollector | None" = None

    def __new__(cls) -> "MetricsCollector":
        """Ensure singleton instance."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialize_metrics()
        return cls._instance

    def _initialize_metrics(self) -> None:
        # Operation metrics
        self.operations: Counter = Counter(
            "sqlcache_operations_total",
            "Total number of cache operations",
            labelnames=["operation", "status", "table"],
        )

        self.operation_duration: Histogram = Histogram(
            "sqlcache_operation_duration_seconds",
            "Cache operation duration in seconds",
            labelnames=["operation"],
            buckets=(0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0),
        )

        # Fetch metrics
        self.fetch_results: Counter = Counter(
            "sqlcache_fetch_results_total",
            "Fetch results by outcome",
            labelnames=["result", "table"],
        )

        # Store metrics
        self.store_fallbacks: Counter = Counter(
            "sqlcache_store_fallbacks_total",
            "Stores that fell back to UPDATE after an insert collision",
            labelnames=["table"],
        )

        # Statement cache metrics
        self.statement_cache: Counter = Counter(
            "sqlcache_statement_cache_total",
            "Prepared statement cache lookups",
            labelnames=["result"],
        )

    def increment_operation(self, operation: str, status: str, table: str) -> None:
        """Increment operation counter.

        Args:
            operation: Operation name (fetch, store, remove, ...).
            status: Outcome (success or error).
            table: Cache table name.
        """
        self.operations.labels(operation=operation, status=status, table=table).inc()

    def observe_operation_duration(self, operation: str, duration: float) -> None:
        """Record operation duration in seconds."""
        self.operation_duration.labels(operation=operation).observe(duration)

    def increment_fetch_result(self, hit: bool, table: str) -> None:
        """Count a fetch as a hit or a miss."""
        self.fetch_results.labels(result="hit" if hit else "miss", table=table).inc()

    def increment_store_fallback(self, table: str) -> None:
        """Count a store that fell back to the update statement."""
        self.store_fallbacks.labels(table=table).inc()

    def increment_statement_cache(self, hit: bool) -> None:
        """Count a statement cache lookup."""
        self.statement_cache.labels(result="hit" if hit else "miss").inc()


# Singleton instance
metrics = MetricsCollector()

"""
Shared metrics configuration for the Pricing Access Layer.
"""

from prometheus_client import Counter, Histogram, Gauge, Info, CollectorRegistry
from typing import Dict, Any, Optional
import time
from contextlib import contextmanager


class MetricsCollector:
    """Centralized metrics collector for a component."""

    def __init__(self, service_name: str, registry: Optional[CollectorRegistry] = None):
        self.service_name = service_name
        # Private registry unless one is supplied; keeps repeated construction safe.
        self.registry = registry if registry is not None else CollectorRegistry()
        self._metrics: Dict[str, Any] = {}
        self._setup_metrics()

    def _setup_metrics(self):
        """Set up pricing accessor metrics."""

        self._metrics["service_info"] = Info(
            "service_info",
            "Service information",
            registry=self.registry
        )
        self._metrics["service_info"].info({
            "service": self.service_name,
            "version": "1.0.0"
        })

        # Cache metrics
        self._metrics["pricing_cache_requests_total"] = Counter(
            "pricing_cache_requests_total",
            "Cache lookups by result",
            ["cache", "result"],
            registry=self.registry
        )

        self._metrics["pricing_cache_invalidations_total"] = Counter(
            "pricing_cache_invalidations_total",
            "Cache entries removed by write-through invalidation",
            ["cache"],
            registry=self.registry
        )

        # Store metrics
        self._metrics["pricing_store_operations_total"] = Counter(
            "pricing_store_operations_total",
            "Remote store operations",
            ["operation", "status"],
            registry=self.registry
        )

        self._metrics["pricing_store_operation_duration_seconds"] = Histogram(
            "pricing_store_operation_duration_seconds",
            "Remote store operation duration in seconds",
            ["operation"],
            registry=self.registry
        )

        # Pool metrics
        self._metrics["pricing_pool_slots_in_use"] = Gauge(
            "pricing_pool_slots_in_use",
            "Pool slots currently held",
            ["pool"],
            registry=self.registry
        )

        self._metrics["pricing_pool_waiters"] = Gauge(
            "pricing_pool_waiters",
            "Callers queued for a pool slot",
            ["pool"],
            registry=self.registry
        )

        self._metrics["pricing_pool_acquire_wait_seconds"] = Histogram(
            "pricing_pool_acquire_wait_seconds",
            "Time spent waiting for a pool slot",
            ["pool"],
            registry=self.registry
        )

        self._metrics["pricing_pool_acquire_timeouts_total"] = Counter(
            "pricing_pool_acquire_timeouts_total",
            "Acquisitions that gave up waiting",
            ["pool"],
            registry=self.registry
        )

    def get_sample_value(self, name: str, **labels) -> Optional[float]:
        """Read back a sample from this collector's registry."""
        return self.registry.get_sample_value(name, labels)

    @contextmanager
    def time_operation(self, operation_name: str, **labels):
        """Context manager to time an operation."""
        start_time = time.perf_counter()
        try:
            yield
        finally:
            duration = time.perf_counter() - start_time
            if operation_name in self._metrics:
                self._metrics[operation_name].labels(**labels).observe(duration)

    def increment_counter(self, metric_name: str, amount: float = 1.0, **labels):
        """Increment a counter metric."""
        if metric_name in self._metrics:
            self._metrics[metric_name].labels(**labels).inc(amount)

    def set_gauge(self, metric_name: str, value: float, **labels):
        """Set a gauge metric value."""
        if metric_name in self._metrics:
            self._metrics[metric_name].labels(**labels).set(value)

    def observe_histogram(self, metric_name: str, value: float, **labels):
        """Observe a histogram metric."""
        if metric_name in self._metrics:
            self._metrics[metric_name].labels(**labels).observe(value)


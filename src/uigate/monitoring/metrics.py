"""
Metrics Collection
Prometheus metrics for the generation pipeline
"""

import time
from contextlib import contextmanager
from typing import Callable, Iterable, Iterator, Optional

from prometheus_client import REGISTRY, CollectorRegistry, Counter, Gauge, Histogram, generate_latest


class MetricsCollector:
    """
    Collects and exposes Prometheus metrics for the pipeline.
    """

    def __init__(self, registry: Optional[CollectorRegistry] = None) -> None:
        self.registry = registry or REGISTRY

        # Generation metrics
        self.generations_total = Counter(
            "uigate_generations_total",
            "Total number of generation requests",
            ["status", "intent"],
            registry=self.registry,
        )
        self.generation_duration = Histogram(
            "uigate_generation_duration_seconds",
            "Generation pipeline duration in seconds",
            ["status"],
            buckets=[0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 2.5],
            registry=self.registry,
        )

        # Gate metrics
        self.rejections_total = Counter(
            "uigate_rejections_total",
            "Total number of rejected requests",
            ["stage", "kind"],
            registry=self.registry,
        )
        self.violations_total = Counter(
            "uigate_violations_total",
            "Total number of violations reported",
            ["category"],
            registry=self.registry,
        )

        # Version metrics
        self.rollbacks_total = Counter(
            "uigate_rollbacks_total",
            "Total number of rollback requests",
            ["status"],
            registry=self.registry,
        )
        self.stored_versions = Gauge(
            "uigate_stored_versions",
            "Versions currently held in the store",
            registry=self.registry,
        )

        # Error metrics
        self.errors_total = Counter(
            "uigate_errors_total",
            "Total number of unexpected errors",
            ["error_type", "component"],
            registry=self.registry,
        )

        # System metrics
        self.uptime = Gauge(
            "uigate_uptime_seconds",
            "Process uptime in seconds",
            registry=self.registry,
        )
        self.start_time = time.time()

    def record_generation(self, status: str, intent: str, duration: float) -> None:
        """Record a finished generation request."""
        self.generations_total.labels(status=status, intent=intent).inc()
        self.generation_duration.labels(status=status).observe(duration)

    def record_rejection(self, stage: str, kind: str, categories: Iterable[str] = ()) -> None:
        """Record a rejection and each violation category that caused it."""
        self.rejections_total.labels(stage=stage, kind=kind).inc()
        for category in categories:
            self.violations_total.labels(category=category).inc()

    def record_rollback(self, status: str) -> None:
        self.rollbacks_total.labels(status=status).inc()

    def set_stored_versions(self, count: int) -> None:
        self.stored_versions.set(count)

    def record_error(self, error_type: str, component: str) -> None:
        """Record an unexpected error."""
        self.errors_total.labels(error_type=error_type, component=component).inc()

    def update_uptime(self) -> None:
        self.uptime.set(time.time() - self.start_time)

    @contextmanager
    def measure_duration(self, callback: Callable[[float], None]) -> Iterator[None]:
        """Context manager to measure operation duration."""
        start = time.perf_counter()
        try:
            yield
        finally:
            callback(time.perf_counter() - start)

    def get_metrics(self) -> bytes:
        """Get metrics in Prometheus format."""
        self.update_uptime()
        return generate_latest(self.registry)


# Global metrics collector instance
metrics_collector = MetricsCollector()

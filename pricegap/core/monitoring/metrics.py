"""Prometheus metrics for backfill operations."""

from __future__ import annotations

from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram, generate_latest

_ALLOWED_OPERATIONS = frozenset({"range", "bulk"})


class BackfillMetrics:
    """Counters and gauges describing provider usage and backfill outcomes."""

    def __init__(self, *, registry: CollectorRegistry | None = None) -> None:
        self.registry = registry or CollectorRegistry()
        self.provider_calls_total = Counter(
            "pricegap_provider_calls_total",
            "Total count of price provider fetch calls.",
            ("provider", "outcome"),
            registry=self.registry,
        )
        self.provider_latency_seconds = Histogram(
            "pricegap_provider_latency_seconds",
            "Latency distribution of price provider fetch calls.",
            buckets=(0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, float("inf")),
            registry=self.registry,
        )
        self.prices_added_total = Counter(
            "pricegap_prices_added_total",
            "Total count of price observations written by backfills.",
            registry=self.registry,
        )
        self.backfill_failures_total = Counter(
            "pricegap_backfill_failures_total",
            "Total count of failed symbol backfills.",
            ("operation",),
            registry=self.registry,
        )
        self.budget_remaining = Gauge(
            "pricegap_provider_budget_remaining",
            "Provider calls left in the current daily budget.",
            registry=self.registry,
        )

    def observe_call(self, provider: str, latency_seconds: float, *, success: bool) -> None:
        self.provider_calls_total.labels(provider=provider, outcome="success" if success else "failure").inc()
        self.provider_latency_seconds.observe(latency_seconds)

    def add_prices(self, count: int) -> None:
        if count > 0:
            self.prices_added_total.inc(count)

    def record_failure(self, operation: str) -> None:
        label = operation if operation in _ALLOWED_OPERATIONS else "__other__"
        self.backfill_failures_total.labels(operation=label).inc()

    def set_budget_remaining(self, remaining: int) -> None:
        self.budget_remaining.set(remaining)

    def render(self) -> bytes:
        """Render metrics in Prometheus exposition format."""

        return generate_latest(self.registry)


__all__ = ["BackfillMetrics"]

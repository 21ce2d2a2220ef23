"""Prometheus metrics for the search engine boundary, bridged to OpenTelemetry."""

from __future__ import annotations

from contextlib import contextmanager
import time
from typing import TYPE_CHECKING, Any

from opentelemetry import metrics as otel_metrics
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest


if TYPE_CHECKING:
    from collections.abc import Generator


_meter_holder: dict[str, Any] = {"meter": None}


def _get_meter():
    meter = _meter_holder.get("meter")
    if meter is None:
        # Resolves to a no-op meter until an SDK MeterProvider is installed.
        meter = otel_metrics.get_meter(__name__)
        _meter_holder["meter"] = meter
    return meter


class _BoundMetric:
    def __init__(self, wrapper: MetricBridge, labels: dict[str, str]) -> None:
        self._wrapper = wrapper
        self._labels = labels

    def inc(self, amount: float = 1.0) -> None:
        self._wrapper.inc(self._labels, amount)

    def observe(self, value: float) -> None:
        self._wrapper.observe(self._labels, value)


class MetricBridge:
    """Bridge Prometheus metrics to OTel instruments."""

    def __init__(
        self,
        prom_metric: Counter | Histogram,
        *,
        otel_name: str,
        otel_description: str,
        otel_kind: str,
    ) -> None:
        self._prom_metric = prom_metric
        self._otel_name = otel_name
        self._otel_description = otel_description
        self._otel_kind = otel_kind
        self._otel_instrument = None

    def labels(self, **labels: str) -> _BoundMetric:
        return _BoundMetric(self, labels)

    def _ensure_otel_instrument(self):
        if self._otel_instrument is not None:
            return self._otel_instrument
        meter = _get_meter()
        if self._otel_kind == "counter":
            self._otel_instrument = meter.create_counter(self._otel_name, description=self._otel_description)
        elif self._otel_kind == "histogram":
            self._otel_instrument = meter.create_histogram(self._otel_name, description=self._otel_description)
        else:
            raise ValueError(f"Unknown metric kind: {self._otel_kind}")
        return self._otel_instrument

    def inc(self, labels: dict[str, str], amount: float) -> None:
        self._prom_metric.labels(**labels).inc(amount)
        self._ensure_otel_instrument().add(amount, labels)

    def observe(self, labels: dict[str, str], value: float) -> None:
        self._prom_metric.labels(**labels).observe(value)
        self._ensure_otel_instrument().record(value, labels)


_SEARCH_ENGINE_REQUESTS_PROM = Counter(
    "search_engine_requests_total",
    "Requests sent to the search engine",
    ["operation", "status"],
)

_SEARCH_ENGINE_LATENCY_PROM = Histogram(
    "search_engine_latency_seconds",
    "Search engine request latency",
    ["operation"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)

_BULK_DOCUMENTS_PROM = Counter(
    "bulk_documents_total",
    "Documents sent in bulk requests",
    ["index"],
)

_GENERATIONS_DELETED_PROM = Counter(
    "index_generations_deleted_total",
    "Orphan generations deleted after an alias swap",
    ["alias"],
)

SEARCH_ENGINE_REQUESTS = MetricBridge(
    _SEARCH_ENGINE_REQUESTS_PROM,
    otel_name="search_engine_requests_total",
    otel_description="Requests sent to the search engine",
    otel_kind="counter",
)

SEARCH_ENGINE_LATENCY = MetricBridge(
    _SEARCH_ENGINE_LATENCY_PROM,
    otel_name="search_engine_latency_seconds",
    otel_description="Search engine request latency",
    otel_kind="histogram",
)

BULK_DOCUMENTS = MetricBridge(
    _BULK_DOCUMENTS_PROM,
    otel_name="bulk_documents_total",
    otel_description="Documents sent in bulk requests",
    otel_kind="counter",
)

GENERATIONS_DELETED = MetricBridge(
    _GENERATIONS_DELETED_PROM,
    otel_name="index_generations_deleted_total",
    otel_description="Orphan generations deleted after an alias swap",
    otel_kind="counter",
)


@contextmanager
def track_latency(histogram: MetricBridge, **labels: str) -> Generator[None, None, None]:
    """Context manager to track operation latency."""
    start = time.perf_counter()
    try:
        yield
    finally:
        histogram.labels(**labels).observe(time.perf_counter() - start)


def get_metrics() -> bytes:
    """Generate Prometheus metrics output."""
    return generate_latest()


def get_metrics_content_type() -> str:
    return CONTENT_TYPE_LATEST

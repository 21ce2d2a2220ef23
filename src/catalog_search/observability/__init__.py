"""Observability module for OpenTelemetry-aligned tracing, metrics, and logging."""

from catalog_search.observability.context import (
    bind_index_context,
    get_trace_context,
    set_trace_context,
    trace_context,
)
from catalog_search.observability.logging import JsonFormatter, configure_logging
from catalog_search.observability.metrics import (
    BULK_DOCUMENTS,
    GENERATIONS_DELETED,
    SEARCH_ENGINE_LATENCY,
    SEARCH_ENGINE_REQUESTS,
    get_metrics,
    get_metrics_content_type,
    track_latency,
)
from catalog_search.observability.tracing import (
    configure_trace_exporter,
    create_span,
    get_tracer,
    init_tracing,
)


__all__ = [
    "BULK_DOCUMENTS",
    "GENERATIONS_DELETED",
    "SEARCH_ENGINE_LATENCY",
    "SEARCH_ENGINE_REQUESTS",
    "JsonFormatter",
    "bind_index_context",
    "configure_logging",
    "configure_trace_exporter",
    "create_span",
    "get_metrics",
    "get_metrics_content_type",
    "get_trace_context",
    "get_tracer",
    "init_tracing",
    "set_trace_context",
    "trace_context",
    "track_latency",
]

"""Observability module for OpenTelemetry-aligned tracing, metrics, and logging."""

from cognishelf_search.observability.context import get_trace_context, index_context, trace_context
from cognishelf_search.observability.logging import JsonFormatter, configure_logging, configure_logging_from_settings
from cognishelf_search.observability.metrics import (
    INDEX_DOC_COUNT,
    INDEX_MUTATIONS,
    SEARCH_COUNT,
    SEARCH_LATENCY,
    get_metrics,
    get_metrics_content_type,
    init_metrics,
    track_latency,
)
from cognishelf_search.observability.tracing import create_span, get_tracer, init_tracing


__all__ = [
    "INDEX_DOC_COUNT",
    "INDEX_MUTATIONS",
    "SEARCH_COUNT",
    "SEARCH_LATENCY",
    "JsonFormatter",
    "configure_logging",
    "configure_logging_from_settings",
    "create_span",
    "get_metrics",
    "get_metrics_content_type",
    "get_trace_context",
    "get_tracer",
    "init_metrics",
    "index_context",
    "init_tracing",
    "trace_context",
    "track_latency",
]

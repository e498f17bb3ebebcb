"""Observability module for metrics and monitoring."""

from docsearch.observability.metrics import (
    MetricsMiddleware,
    get_metrics,
    get_metrics_content_type,
    track_embedding_request,
    track_ingestion,
    track_search_request,
)

__all__ = [
    "MetricsMiddleware",
    "get_metrics",
    "get_metrics_content_type",
    "track_embedding_request",
    "track_ingestion",
    "track_search_request",
]

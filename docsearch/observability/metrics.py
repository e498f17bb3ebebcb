"""Prometheus metrics for the document search service.

Provides metrics instrumentation for:
- HTTP request latency and counts
- Embedding request latency and token usage
- Search result counts and similarity
- Document ingestion outcomes
"""

import time
from collections.abc import Awaitable, Callable

from fastapi import Request, Response
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    Counter,
    Histogram,
    generate_latest,
)
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

# HTTP Request Metrics
HTTP_REQUEST_DURATION = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint", "status_code"],
    buckets=[0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

HTTP_REQUEST_TOTAL = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status_code"],
)

# Embedding Metrics
EMBEDDING_REQUEST_DURATION = Histogram(
    "embedding_request_duration_seconds",
    "Embedding request duration in seconds",
    ["model", "status"],
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0],
)

EMBEDDING_REQUEST_TOTAL = Counter(
    "embedding_requests_total",
    "Total embedding requests",
    ["model", "status"],
)

EMBEDDING_TOKENS_TOTAL = Counter(
    "embedding_tokens_total",
    "Total tokens consumed by embedding requests",
    ["model"],
)

# Search Metrics
SEARCH_RESULTS_RETURNED = Histogram(
    "search_results_returned",
    "Number of documents returned per search",
    buckets=[0, 1, 2, 3, 5, 10, 20, 50],
)

SEARCH_TOP_SIMILARITY = Histogram(
    "search_top_similarity",
    "Top similarity per search",
    buckets=[0.1, 0.2, 0.3, 0.4, 0.5, 0.6, 0.7, 0.8, 0.9, 1.0],
)

SEARCH_REQUEST_TOTAL = Counter(
    "search_requests_total",
    "Total search requests",
    ["status"],
)

# Ingestion Metrics
DOCUMENTS_INGESTED_TOTAL = Counter(
    "documents_ingested_total",
    "Total document ingestion attempts",
    ["status"],
)


class MetricsMiddleware(BaseHTTPMiddleware):
    """Middleware to collect HTTP request metrics."""

    def __init__(self, app: ASGIApp) -> None:
        """Initialize the middleware."""
        super().__init__(app)

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        """Process request and collect metrics."""
        # Skip metrics endpoint to avoid recursion
        if request.url.path == "/metrics":
            return await call_next(request)

        start_time = time.perf_counter()

        response = await call_next(request)

        duration = time.perf_counter() - start_time
        endpoint = self._normalize_endpoint(request.url.path)

        HTTP_REQUEST_DURATION.labels(
            method=request.method,
            endpoint=endpoint,
            status_code=response.status_code,
        ).observe(duration)

        HTTP_REQUEST_TOTAL.labels(
            method=request.method,
            endpoint=endpoint,
            status_code=response.status_code,
        ).inc()

        return response

    def _normalize_endpoint(self, path: str) -> str:
        """Normalize endpoint path to reduce cardinality."""
        if path.startswith("/health"):
            return "/health"
        if path.startswith("/api/v1/"):
            parts = path.split("/")
            if len(parts) >= 4:
                return f"/api/v1/{parts[3]}"
        return "other"


def get_metrics() -> bytes:
    """Generate Prometheus metrics output."""
    return generate_latest()


def get_metrics_content_type() -> str:
    """Get the content type for metrics response."""
    return CONTENT_TYPE_LATEST


def track_embedding_request(
    model: str,
    duration: float,
    tokens: int,
    success: bool = True,
) -> None:
    """Track embedding request metrics.

    Args:
        model: Embedding model name.
        duration: Request duration in seconds.
        tokens: Tokens reported by the provider.
        success: Whether the request succeeded.
    """
    status = "success" if success else "error"

    EMBEDDING_REQUEST_DURATION.labels(model=model, status=status).observe(duration)
    EMBEDDING_REQUEST_TOTAL.labels(model=model, status=status).inc()
    if tokens > 0:
        EMBEDDING_TOKENS_TOTAL.labels(model=model).inc(tokens)


def track_search_request(
    results_returned: int,
    top_similarity: float,
    success: bool = True,
) -> None:
    """Track search request metrics.

    Args:
        results_returned: Number of documents returned.
        top_similarity: Highest similarity in the result set.
        success: Whether the search succeeded.
    """
    SEARCH_REQUEST_TOTAL.labels(status="success" if success else "error").inc()
    if not success:
        return

    SEARCH_RESULTS_RETURNED.observe(results_returned)
    if top_similarity > 0:
        SEARCH_TOP_SIMILARITY.observe(top_similarity)


def track_ingestion(success: bool = True) -> None:
    """Track a document ingestion attempt."""
    DOCUMENTS_INGESTED_TOTAL.labels(status="success" if success else "error").inc()

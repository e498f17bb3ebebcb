"""FastAPI application entry point.

Configures the application with logging, exception handling, CORS,
metrics and health checks.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Any

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse

from docsearch import __version__
from docsearch.api.dependencies import Services, build_services
from docsearch.api.envelope import CORSHeadersMiddleware
from docsearch.api.routes import router
from docsearch.config import Settings, get_settings
from docsearch.exceptions import DocSearchError, ErrorCode
from docsearch.handlers.ingestion import DocumentIngestionHandler
from docsearch.handlers.search import SemanticSearchHandler
from docsearch.logging_config import get_logger, setup_logging
from docsearch.observability.metrics import (
    MetricsMiddleware,
    get_metrics,
    get_metrics_content_type,
)

logger = get_logger(__name__)


def create_app(
    settings: Settings | None = None,
    services: Services | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Application settings. Loaded from the environment if omitted.
        services: Collaborators to use instead of the configured ones.

    Returns:
        Configured FastAPI application instance.
    """
    settings = settings or get_settings()
    services = services or build_services(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        setup_logging(settings)
        logger.info(
            "Starting document search service",
            extra={
                "version": __version__,
                "environment": settings.environment.value,
                "store_backend": settings.store_backend.value,
            },
        )

        try:
            await services.store.ensure_ready(settings.embedding.dimensions)
            app.state.store_ready = True
        except DocSearchError as e:
            logger.error(f"Document store not ready: {e.message}", extra=e.details)
            app.state.store_ready = False

        yield

        await services.close()
        logger.info("Shutting down document search service")

    app = FastAPI(
        title="Semantic Document Search",
        description="Document ingestion and owner-scoped semantic search",
        version=__version__,
        lifespan=lifespan,
        debug=settings.debug,
    )

    app.state.settings = settings
    app.state.services = services
    app.state.store_ready = None
    app.state.ingestion_handler = DocumentIngestionHandler(
        verifier=services.verifier,
        embedding_service=services.embedding_service,
        store=services.store,
    )
    app.state.search_handler = SemanticSearchHandler(
        verifier=services.verifier,
        embedding_service=services.embedding_service,
        store=services.store,
    )

    app.add_middleware(MetricsMiddleware)
    app.add_middleware(
        CORSHeadersMiddleware,
        allowed_origins=settings.cors.allowed_origins,
    )

    app.add_exception_handler(DocSearchError, docsearch_exception_handler)

    app.include_router(router)
    app.add_api_route("/health", health_check, methods=["GET"], tags=["Health"])
    app.add_api_route("/health/ready", readiness_check, methods=["GET"], tags=["Health"])
    app.add_api_route("/health/live", liveness_check, methods=["GET"], tags=["Health"])
    app.add_api_route("/metrics", metrics_endpoint, methods=["GET"], tags=["Health"])

    return app


async def docsearch_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """Handle DocSearchError exceptions raised outside the handlers."""
    if not isinstance(exc, DocSearchError):
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": str(exc)},
        )

    logger.error(
        f"Request failed: {exc.message}",
        extra={
            "error_code": exc.code.value,
            "path": request.url.path,
            "details": exc.details,
        },
    )

    return JSONResponse(
        status_code=get_status_code(exc.code),
        content={
            "success": False,
            "error": exc.message,
            "code": exc.code.value,
            "details": exc.details,
        },
    )


def get_status_code(code: ErrorCode) -> int:
    """Map error code to HTTP status code."""
    if code == ErrorCode.VALIDATION_ERROR:
        return 400
    if code in (ErrorCode.AUTHENTICATION_REQUIRED, ErrorCode.AUTHENTICATION_INVALID):
        return 401
    if code == ErrorCode.EMBEDDING_TIMEOUT:
        return 504
    if code in (
        ErrorCode.EMBEDDING_SERVICE_ERROR,
        ErrorCode.EMBEDDING_DIMENSION_MISMATCH,
        ErrorCode.IDENTITY_SERVICE_ERROR,
    ):
        return 502
    return 500


async def health_check() -> dict[str, Any]:
    """Basic health check endpoint.

    Returns:
        Health status with version and timestamp.
    """
    return {
        "status": "healthy",
        "version": __version__,
        "timestamp": datetime.now(UTC).isoformat(),
    }


async def readiness_check(request: Request) -> JSONResponse:
    """Readiness probe.

    The store check is "unknown" until startup has run.
    """
    store_ready = request.app.state.store_ready
    checks: dict[str, str] = {
        "config": "ok",
        "store": {True: "ok", False: "error", None: "unknown"}[store_ready],
    }
    ready = store_ready is not False

    return JSONResponse(
        status_code=200 if ready else 503,
        content={
            "status": "ready" if ready else "not_ready",
            "checks": checks,
            "timestamp": datetime.now(UTC).isoformat(),
        },
    )


async def liveness_check() -> dict[str, str]:
    """Liveness probe.

    Returns:
        Liveness status.
    """
    return {"status": "alive"}


async def metrics_endpoint() -> Response:
    """Prometheus exposition."""
    return Response(content=get_metrics(), media_type=get_metrics_content_type())


# Create the application instance
app = create_app()

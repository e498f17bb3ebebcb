"""Response envelope and CORS helpers shared by the API routes."""

from collections.abc import Awaitable, Callable
from typing import Any

from fastapi import Request, Response
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from docsearch.results import Err, Ok

ALLOW_HEADERS = "authorization, x-client-info, apikey, content-type"
ALLOW_METHODS = "GET, POST, PUT, DELETE, OPTIONS"


def get_allowed_origin(request_origin: str | None, allowed_origins: list[str]) -> str:
    """Echo an allowed request origin, otherwise fall back to the first entry."""
    if request_origin and request_origin in allowed_origins:
        return request_origin
    return allowed_origins[0]


def cors_headers(request_origin: str | None, allowed_origins: list[str]) -> dict[str, str]:
    return {
        "Access-Control-Allow-Origin": get_allowed_origin(request_origin, allowed_origins),
        "Access-Control-Allow-Headers": ALLOW_HEADERS,
        "Access-Control-Allow-Methods": ALLOW_METHODS,
        "Vary": "Origin",
    }


class CORSHeadersMiddleware(BaseHTTPMiddleware):
    """Answers preflight requests and stamps CORS headers on responses."""

    def __init__(self, app: ASGIApp, allowed_origins: list[str]) -> None:
        super().__init__(app)
        if not allowed_origins:
            raise ValueError("at least one allowed origin is required")
        self._allowed_origins = allowed_origins

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        headers = cors_headers(request.headers.get("origin"), self._allowed_origins)
        if request.method == "OPTIONS":
            return PlainTextResponse("ok", headers=headers)

        response = await call_next(request)
        response.headers.update(headers)
        return response


def success_response(payload: dict[str, Any], status_code: int = 200) -> JSONResponse:
    """Build ``{"success": true, ...payload}``."""
    return JSONResponse(status_code=status_code, content={"success": True, **payload})


def error_response(err: Err, status_code: int = 400) -> JSONResponse:
    """Build ``{"success": false, "error": message}`` plus any metadata."""
    content: dict[str, Any] = {"success": False, "error": err.message}
    if err.metadata:
        content["metadata"] = err.metadata
    return JSONResponse(status_code=status_code, content=content)


def result_response(result: Ok[Any] | Err, success_status: int = 200) -> JSONResponse:
    """Render a handler outcome as an envelope."""
    if isinstance(result, Err):
        return error_response(result)
    return success_response(result.value.to_body(), status_code=success_status)

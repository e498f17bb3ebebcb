"""API routes for document ingestion and semantic search."""

import json
from typing import Any

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from docsearch.api.dependencies import get_ingestion_handler, get_search_handler
from docsearch.api.envelope import result_response
from docsearch.handlers.ingestion import DocumentIngestionHandler
from docsearch.handlers.search import SemanticSearchHandler

router = APIRouter(prefix="/api/v1", tags=["Documents"])


async def read_json_body(request: Request) -> Any:
    """Decode the request body; undecodable bodies become ``None``."""
    try:
        return await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return None


@router.post("/documents", status_code=status.HTTP_201_CREATED)
async def ingest_document(
    request: Request,
    handler: DocumentIngestionHandler = Depends(get_ingestion_handler),
) -> JSONResponse:
    """Embed and store a document for the authenticated caller."""
    result = await handler.handle(
        request.headers.get("authorization"),
        await read_json_body(request),
    )
    return result_response(result, success_status=status.HTTP_201_CREATED)


@router.post("/search")
async def search_documents(
    request: Request,
    handler: SemanticSearchHandler = Depends(get_search_handler),
) -> JSONResponse:
    """Search the authenticated caller's documents by meaning."""
    result = await handler.handle(
        request.headers.get("authorization"),
        await read_json_body(request),
    )
    return result_response(result)

"""Request handlers for document ingestion and semantic search."""

from docsearch.handlers.ingestion import DocumentIngestionHandler
from docsearch.handlers.models import (
    IngestMetadata,
    IngestRequest,
    IngestResponse,
    SearchMetadata,
    SearchRequest,
    SearchResponse,
)
from docsearch.handlers.search import SemanticSearchHandler

__all__ = [
    "DocumentIngestionHandler",
    "IngestMetadata",
    "IngestRequest",
    "IngestResponse",
    "SearchMetadata",
    "SearchRequest",
    "SearchResponse",
    "SemanticSearchHandler",
]

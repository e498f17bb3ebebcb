"""Embedding provider module."""

from docsearch.embeddings.models import EmbeddingResult
from docsearch.embeddings.service import EmbeddingService, OpenAIEmbeddingService

__all__ = [
    "EmbeddingResult",
    "EmbeddingService",
    "OpenAIEmbeddingService",
]

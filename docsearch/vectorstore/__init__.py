"""Document store module."""

from docsearch.vectorstore.postgrest import PostgRESTDocumentStore
from docsearch.vectorstore.service import DocumentStore, QdrantDocumentStore, clamp_similarity

__all__ = [
    "DocumentStore",
    "PostgRESTDocumentStore",
    "QdrantDocumentStore",
    "clamp_similarity",
]

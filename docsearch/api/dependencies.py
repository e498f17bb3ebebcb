"""Service construction and FastAPI dependencies."""

from dataclasses import dataclass

from fastapi import Request

from docsearch.auth.verifier import HTTPIdentityVerifier, IdentityVerifier
from docsearch.config import Settings, StoreBackend
from docsearch.embeddings.service import EmbeddingService, OpenAIEmbeddingService
from docsearch.exceptions import ConfigurationError
from docsearch.handlers.ingestion import DocumentIngestionHandler
from docsearch.handlers.search import SemanticSearchHandler
from docsearch.vectorstore.postgrest import PostgRESTDocumentStore
from docsearch.vectorstore.service import DocumentStore, QdrantDocumentStore


@dataclass
class Services:
    """External collaborators shared by both handlers."""

    verifier: IdentityVerifier
    embedding_service: EmbeddingService
    store: DocumentStore

    async def close(self) -> None:
        await self.verifier.close()
        await self.embedding_service.close()
        await self.store.close()


def build_store(settings: Settings) -> DocumentStore:
    """Create the configured document store."""
    if settings.store_backend == StoreBackend.QDRANT:
        return QdrantDocumentStore(settings.qdrant)
    if settings.store_backend == StoreBackend.POSTGREST:
        return PostgRESTDocumentStore(settings.postgrest)
    raise ConfigurationError(
        f"Unsupported store backend: {settings.store_backend}",
        details={"store_backend": str(settings.store_backend)},
    )


def build_services(settings: Settings) -> Services:
    """Create production collaborators from settings.

    Clients connect lazily, so building services performs no I/O.
    """
    return Services(
        verifier=HTTPIdentityVerifier(settings.auth),
        embedding_service=OpenAIEmbeddingService(settings.embedding),
        store=build_store(settings),
    )


def get_ingestion_handler(request: Request) -> DocumentIngestionHandler:
    return request.app.state.ingestion_handler


def get_search_handler(request: Request) -> SemanticSearchHandler:
    return request.app.state.search_handler

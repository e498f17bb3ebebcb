"""Document store interface and Qdrant implementation."""

from abc import ABC, abstractmethod
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from qdrant_client import AsyncQdrantClient
from qdrant_client.models import (
    Distance,
    FieldCondition,
    Filter,
    MatchValue,
    PayloadSchemaType,
    PointStruct,
    VectorParams,
)

from docsearch.auth.models import Caller
from docsearch.config import QdrantSettings
from docsearch.documents.models import DocumentMatch, DocumentRecord, NewDocument
from docsearch.exceptions import (
    DocSearchError,
    ErrorCode,
    PersistenceError,
    SearchError,
)
from docsearch.logging_config import get_logger

logger = get_logger(__name__)

OWNER_FIELD = "user_id"

# Qdrant stores float32 vectors, so an exact match can score just under 1.0.
SIMILARITY_TOLERANCE = 1e-6


def clamp_similarity(score: float) -> float:
    """Map a raw cosine score onto [0, 1]; anti-correlated counts as unrelated."""
    return min(1.0, max(0.0, score))


class DocumentStore(ABC):
    """Owner-scoped document persistence and similarity search.

    Every operation takes the verified caller; implementations derive the
    read and write scope from it and from nothing else.
    """

    async def ensure_ready(self, dimensions: int) -> None:
        """Prepare backing storage for vectors of the given size."""

    async def close(self) -> None:
        """Release client resources."""

    @abstractmethod
    async def insert(self, caller: Caller, document: NewDocument) -> DocumentRecord:
        """Persist a document owned by the caller.

        Args:
            caller: Verified caller who becomes the owner.
            document: Document with its embedding.

        Returns:
            Identity of the stored document.

        Raises:
            PersistenceError: If the insert is rejected.
        """
        ...

    @abstractmethod
    async def match(
        self,
        caller: Caller,
        embedding: list[float],
        threshold: float,
        count: int,
    ) -> list[DocumentMatch]:
        """Find the caller's documents most similar to an embedding.

        Args:
            caller: Verified caller whose documents are searched.
            embedding: Query vector.
            threshold: Minimum similarity to keep.
            count: Maximum results to return.

        Returns:
            Matches ordered by descending similarity.

        Raises:
            SearchError: If the search fails.
        """
        ...


class QdrantDocumentStore(DocumentStore):
    """Qdrant document store.

    Points carry ``title``, ``content``, ``created_at`` and the owner's
    ``user_id`` as payload; every search is filtered on the owner.
    """

    def __init__(
        self,
        settings: QdrantSettings,
        client: AsyncQdrantClient | None = None,
    ) -> None:
        """Initialize Qdrant document store.

        Args:
            settings: Qdrant configuration.
            client: Existing client (for testing).
        """
        self._settings = settings
        self._client = client
        self._owns_client = client is None

    @property
    def collection(self) -> str:
        return self._settings.collection_name

    async def _get_client(self) -> AsyncQdrantClient:
        """Get or create Qdrant client."""
        if self._client is None:
            api_key = None
            if self._settings.api_key:
                api_key = self._settings.api_key.get_secret_value()

            self._client = AsyncQdrantClient(
                url=self._settings.url,
                api_key=api_key,
            )
        return self._client

    async def close(self) -> None:
        """Close the Qdrant client."""
        if self._owns_client and self._client is not None:
            await self._client.close()
            self._client = None

    async def ensure_ready(self, dimensions: int) -> None:
        """Create the collection and owner index if missing."""
        client = await self._get_client()

        try:
            if await client.collection_exists(self.collection):
                return

            await client.create_collection(
                collection_name=self.collection,
                vectors_config=VectorParams(
                    size=dimensions,
                    distance=Distance.COSINE,
                ),
            )
            await client.create_payload_index(
                collection_name=self.collection,
                field_name=OWNER_FIELD,
                field_schema=PayloadSchemaType.KEYWORD,
            )
            logger.info(
                f"Created collection: {self.collection}",
                extra={"dimensions": dimensions},
            )
        except Exception as e:
            raise DocSearchError(
                f"Failed to prepare collection: {e}",
                code=ErrorCode.COLLECTION_ERROR,
                details={"collection": self.collection, "error": str(e)},
            ) from e

    async def insert(self, caller: Caller, document: NewDocument) -> DocumentRecord:
        client = await self._get_client()
        record = DocumentRecord(id=str(uuid4()), created_at=datetime.now(UTC))
        payload: dict[str, Any] = {
            "title": document.title,
            "content": document.content,
            OWNER_FIELD: caller.user_id,
            "created_at": record.created_at.isoformat() if record.created_at else None,
        }

        try:
            await client.upsert(
                collection_name=self.collection,
                points=[
                    PointStruct(
                        id=record.id,
                        vector=document.embedding,
                        payload=payload,
                    )
                ],
                wait=True,
            )
        except Exception as e:
            raise PersistenceError(
                f"Failed to save document: {e}",
                details={"collection": self.collection, "error": str(e)},
            ) from e

        logger.debug(
            f"Inserted document {record.id}",
            extra={"collection": self.collection},
        )
        return record

    async def match(
        self,
        caller: Caller,
        embedding: list[float],
        threshold: float,
        count: int,
    ) -> list[DocumentMatch]:
        client = await self._get_client()
        owner_filter = Filter(
            must=[FieldCondition(key=OWNER_FIELD, match=MatchValue(value=caller.user_id))]
        )

        try:
            response = await client.query_points(
                collection_name=self.collection,
                query=embedding,
                query_filter=owner_filter,
                limit=count,
                with_payload=True,
            )
        except Exception as e:
            raise SearchError(
                f"Search failed: {e}",
                details={"collection": self.collection, "error": str(e)},
            ) from e

        matches: list[DocumentMatch] = []
        for point in response.points:
            payload = dict(point.payload) if point.payload else {}
            similarity = clamp_similarity(point.score if point.score is not None else 0.0)
            if similarity < threshold - SIMILARITY_TOLERANCE:
                continue
            matches.append(
                DocumentMatch(
                    id=str(point.id),
                    title=payload.get("title", ""),
                    content=payload.get("content", ""),
                    similarity=similarity,
                    created_at=payload.get("created_at"),
                )
            )

        matches.sort(key=lambda m: m.similarity, reverse=True)
        return matches[:count]

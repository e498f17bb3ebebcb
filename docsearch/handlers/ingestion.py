"""Document ingestion handler."""

from typing import Any

from docsearch.auth.verifier import IdentityVerifier, parse_bearer_token
from docsearch.documents.models import NewDocument
from docsearch.embeddings.service import EmbeddingService
from docsearch.exceptions import DocSearchError, ErrorCode
from docsearch.handlers.models import IngestMetadata, IngestRequest, IngestResponse
from docsearch.logging_config import get_logger
from docsearch.observability.metrics import track_ingestion
from docsearch.results import Err, Ok
from docsearch.vectorstore.service import DocumentStore

logger = get_logger(__name__)


class DocumentIngestionHandler:
    """Validates, embeds and stores one document per call.

    Steps run strictly in order and the first failure ends the request:
    local validation, caller verification, embedding, insert. Nothing is
    retried and resubmitting the same content creates another document.
    """

    def __init__(
        self,
        verifier: IdentityVerifier,
        embedding_service: EmbeddingService,
        store: DocumentStore,
    ) -> None:
        """Initialize the handler.

        Args:
            verifier: Resolves bearer tokens to callers.
            embedding_service: Embeds document content.
            store: Persists documents under the caller's ownership.
        """
        self._verifier = verifier
        self._embedding_service = embedding_service
        self._store = store

    async def handle(
        self,
        authorization: str | None,
        body: Any,
    ) -> Ok[IngestResponse] | Err:
        """Ingest a document.

        Args:
            authorization: Raw ``Authorization`` header value.
            body: Decoded JSON request body.

        Returns:
            Ok with the new document id, or Err describing the failure.
        """
        try:
            response = await self._ingest(authorization, body)
        except DocSearchError as e:
            logger.warning(
                f"Ingestion failed: {e.message}",
                extra={"error_code": e.code.value},
            )
            track_ingestion(success=False)
            return Err.from_exception(e)
        except Exception:
            logger.exception("Unexpected ingestion failure")
            track_ingestion(success=False)
            return Err(kind=ErrorCode.INTERNAL_ERROR, message="Unknown error occurred")

        track_ingestion()
        return Ok(response)

    async def _ingest(self, authorization: str | None, body: Any) -> IngestResponse:
        request = IngestRequest.from_body(body)
        token = parse_bearer_token(authorization)
        caller = await self._verifier.verify(token)

        logger.info(
            "Processing ingestion",
            extra={
                "user_id": caller.user_id,
                "title_preview": request.title[:50],
                "content_length": len(request.content),
            },
        )

        embedding = await self._embedding_service.embed(request.content)
        record = await self._store.insert(
            caller,
            NewDocument(
                title=request.title,
                content=request.content,
                embedding=embedding.embedding,
            ),
        )

        logger.info(
            f"Document created with ID: {record.id}",
            extra={"user_id": caller.user_id, "tokens_used": embedding.tokens_used},
        )
        return IngestResponse(
            document_id=record.id,
            metadata=IngestMetadata(
                tokens_used=embedding.tokens_used,
                embedding_dimensions=embedding.dimensions,
            ),
        )

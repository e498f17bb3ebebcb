"""Semantic search handler."""

import time
from typing import Any

from docsearch.auth.verifier import IdentityVerifier, parse_bearer_token
from docsearch.embeddings.service import EmbeddingService
from docsearch.exceptions import DocSearchError, ErrorCode
from docsearch.handlers.models import SearchMetadata, SearchRequest, SearchResponse
from docsearch.logging_config import get_logger
from docsearch.observability.metrics import track_search_request
from docsearch.results import Err, Ok
from docsearch.vectorstore.service import DocumentStore

logger = get_logger(__name__)


def format_execution_time(start: float) -> str:
    """Elapsed time since ``start`` (a perf_counter value) as ``"<n>ms"``."""
    return f"{round((time.perf_counter() - start) * 1000)}ms"


class SemanticSearchHandler:
    """Embeds a query and returns the caller's most similar documents.

    The search scope comes from the verified caller only; request bodies
    cannot name whose documents to search.
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
            embedding_service: Embeds query text with the ingestion model.
            store: Runs owner-scoped similarity search.
        """
        self._verifier = verifier
        self._embedding_service = embedding_service
        self._store = store

    async def handle(
        self,
        authorization: str | None,
        body: Any,
    ) -> Ok[SearchResponse] | Err:
        """Run a semantic search.

        Args:
            authorization: Raw ``Authorization`` header value.
            body: Decoded JSON request body.

        Returns:
            Ok with ranked results, or Err carrying the execution time.
        """
        start = time.perf_counter()
        try:
            return Ok(await self._search(authorization, body, start))
        except DocSearchError as e:
            logger.warning(
                f"Search failed: {e.message}",
                extra={"error_code": e.code.value},
            )
            track_search_request(0, 0.0, success=False)
            return Err.from_exception(
                e, metadata={"executionTime": format_execution_time(start)}
            )
        except Exception:
            logger.exception("Unexpected search failure")
            track_search_request(0, 0.0, success=False)
            return Err(
                kind=ErrorCode.INTERNAL_ERROR,
                message="Unknown error occurred",
                metadata={"executionTime": format_execution_time(start)},
            )

    async def _search(
        self,
        authorization: str | None,
        body: Any,
        start: float,
    ) -> SearchResponse:
        request = SearchRequest.from_body(body)
        token = parse_bearer_token(authorization)
        caller = await self._verifier.verify(token)

        logger.info(
            "Processing search",
            extra={
                "user_id": caller.user_id,
                "query_length": len(request.query),
                "match_threshold": request.match_threshold,
                "match_count": request.match_count,
            },
        )

        embedding = await self._embedding_service.embed(request.query)
        results = await self._store.match(
            caller,
            embedding.embedding,
            threshold=request.match_threshold,
            count=request.match_count,
        )

        execution_time = format_execution_time(start)
        top_similarity = results[0].similarity if results else 0.0
        track_search_request(len(results), top_similarity)
        logger.info(
            f"Found {len(results)} results in {execution_time}",
            extra={"user_id": caller.user_id, "tokens_used": embedding.tokens_used},
        )

        return SearchResponse(
            results=results,
            metadata=SearchMetadata(
                query_tokens=embedding.tokens_used,
                result_count=len(results),
                execution_time=execution_time,
                match_threshold=request.match_threshold,
                match_count=request.match_count,
            ),
        )

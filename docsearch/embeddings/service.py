"""Embedding service interface and implementations."""

import time
from abc import ABC, abstractmethod

import httpx
from pydantic import ValidationError as PydanticValidationError

from docsearch.config import EmbeddingSettings
from docsearch.embeddings.models import EmbeddingResult
from docsearch.exceptions import ErrorCode, UpstreamError
from docsearch.logging_config import get_logger
from docsearch.observability.metrics import track_embedding_request

logger = get_logger(__name__)


class EmbeddingService(ABC):
    """Abstract base class for embedding services.

    Defines the interface for generating text embeddings.
    """

    async def close(self) -> None:
        """Release client resources."""

    @abstractmethod
    async def embed(self, text: str) -> EmbeddingResult:
        """Generate embedding for a single text.

        Args:
            text: Text to embed.

        Returns:
            EmbeddingResult with vector and token usage.

        Raises:
            UpstreamError: If embedding fails.
        """
        ...

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Get the model name used for embeddings."""
        ...

    @property
    @abstractmethod
    def dimensions(self) -> int:
        """Get the embedding dimensions."""
        ...


class OpenAIEmbeddingService(EmbeddingService):
    """Embedding service for OpenAI-compatible ``/embeddings`` APIs.

    Makes exactly one request per call. Failures surface immediately.
    """

    def __init__(
        self,
        settings: EmbeddingSettings,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the embedding service.

        Args:
            settings: Embedding configuration.
            client: HTTP client. Creates new one if not provided.
        """
        self._settings = settings
        self._client = client
        self._owns_client = client is None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._settings.timeout)
        return self._client

    async def close(self) -> None:
        """Close the HTTP client if we own it."""
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    @property
    def model_name(self) -> str:
        """Get the model name."""
        return self._settings.model

    @property
    def dimensions(self) -> int:
        """Get embedding dimensions."""
        return self._settings.dimensions

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._settings.api_key is not None:
            headers["Authorization"] = (
                f"Bearer {self._settings.api_key.get_secret_value()}"
            )
        return headers

    async def embed(self, text: str) -> EmbeddingResult:
        start = time.perf_counter()
        try:
            result = await self._request(text)
        except UpstreamError:
            track_embedding_request(
                model=self.model_name,
                duration=time.perf_counter() - start,
                tokens=0,
                success=False,
            )
            raise

        track_embedding_request(
            model=self.model_name,
            duration=time.perf_counter() - start,
            tokens=result.tokens_used,
        )
        return result

    async def _request(self, text: str) -> EmbeddingResult:
        """Make the embedding request.

        Raises:
            UpstreamError: If request fails or the response is unusable.
        """
        client = await self._get_client()
        url = f"{self._settings.base_url.rstrip('/')}/embeddings"
        payload = {
            "model": self._settings.model,
            "input": text,
            "encoding_format": "float",
        }

        try:
            response = await client.post(url, json=payload, headers=self._headers())
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            logger.error(
                f"Embedding request failed: {status_code}",
                extra={"url": url, "status": status_code, "body": e.response.text[:500]},
            )
            raise UpstreamError(
                f"Embedding provider error: {status_code}",
                code=ErrorCode.EMBEDDING_SERVICE_ERROR,
                status_code=status_code,
            ) from e
        except httpx.TimeoutException as e:
            logger.error("Embedding request timed out", extra={"url": url})
            raise UpstreamError(
                "Embedding provider timed out",
                code=ErrorCode.EMBEDDING_TIMEOUT,
            ) from e
        except httpx.RequestError as e:
            logger.error(f"Embedding request error: {e}", extra={"url": url})
            raise UpstreamError(
                f"Failed to connect to embedding provider: {e}",
                code=ErrorCode.EMBEDDING_SERVICE_ERROR,
            ) from e

        try:
            data = response.json()
            embedding = data["data"][0]["embedding"]
            tokens_used = int(data.get("usage", {}).get("total_tokens", 0))
        except (AttributeError, KeyError, IndexError, TypeError, ValueError) as e:
            raise UpstreamError(
                f"Invalid response from embedding provider: {e}",
                code=ErrorCode.EMBEDDING_SERVICE_ERROR,
                details={"error": str(e)},
            ) from e

        if not isinstance(embedding, list):
            raise UpstreamError(
                "Invalid response from embedding provider: embedding is not a list",
                code=ErrorCode.EMBEDDING_SERVICE_ERROR,
                details={"type": type(embedding).__name__},
            )

        if len(embedding) != self.dimensions:
            raise UpstreamError(
                f"Embedding has {len(embedding)} dimensions, "
                f"expected {self.dimensions}",
                code=ErrorCode.EMBEDDING_DIMENSION_MISMATCH,
                details={"expected": self.dimensions, "actual": len(embedding)},
            )

        logger.debug(
            "Embedding generated",
            extra={"dimensions": len(embedding), "tokens_used": tokens_used},
        )
        try:
            return EmbeddingResult(
                text=text,
                embedding=embedding,
                model=self._settings.model,
                dimensions=len(embedding),
                tokens_used=tokens_used,
            )
        except PydanticValidationError as e:
            raise UpstreamError(
                "Invalid response from embedding provider: "
                f"{e.error_count()} invalid values",
                code=ErrorCode.EMBEDDING_SERVICE_ERROR,
                details={"error": str(e)},
            ) from e

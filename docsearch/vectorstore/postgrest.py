"""PostgREST document store.

Requests are sent with the caller's own access token, so the database's
row level security policies decide which rows are visible or writable. The
similarity RPC is never given a user id.
"""

from typing import Any

import httpx

from docsearch.auth.models import Caller
from docsearch.config import PostgRESTSettings
from docsearch.documents.models import DocumentMatch, DocumentRecord, NewDocument
from docsearch.exceptions import PersistenceError, SearchError
from docsearch.logging_config import get_logger
from docsearch.vectorstore.service import DocumentStore, clamp_similarity

logger = get_logger(__name__)


def _error_message(response: httpx.Response) -> str:
    """Pull the datastore's message out of an error response."""
    try:
        body = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return f"HTTP {response.status_code}"


class PostgRESTDocumentStore(DocumentStore):
    """Document store backed by a PostgREST table and RPC function."""

    def __init__(
        self,
        settings: PostgRESTSettings,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the store.

        Args:
            settings: PostgREST configuration.
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

    def _headers(self, caller: Caller) -> dict[str, str]:
        headers = {
            "Authorization": f"Bearer {caller.access_token.get_secret_value()}",
            "Content-Type": "application/json",
        }
        if self._settings.api_key is not None:
            headers["apikey"] = self._settings.api_key.get_secret_value()
        return headers

    def _url(self, path: str) -> str:
        return f"{self._settings.url.rstrip('/')}/{path}"

    async def insert(self, caller: Caller, document: NewDocument) -> DocumentRecord:
        client = await self._get_client()
        headers = self._headers(caller)
        headers["Prefer"] = "return=representation"
        payload: dict[str, Any] = {
            "title": document.title,
            "content": document.content,
            "embedding": document.embedding,
            "user_id": caller.user_id,
        }

        try:
            response = await client.post(
                self._url(self._settings.table),
                params={"select": "id,created_at"},
                json=payload,
                headers=headers,
            )
        except httpx.RequestError as e:
            raise PersistenceError(f"Failed to save document: {e}") from e

        if response.is_error:
            message = _error_message(response)
            logger.error(
                f"Database insert error: {message}",
                extra={"status": response.status_code},
            )
            raise PersistenceError(
                f"Failed to save document: {message}",
                details={"status_code": response.status_code},
            )

        try:
            rows = response.json()
            row = rows[0] if isinstance(rows, list) else rows
            return DocumentRecord(id=row["id"], created_at=row.get("created_at"))
        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise PersistenceError(f"Failed to save document: {e}") from e

    async def match(
        self,
        caller: Caller,
        embedding: list[float],
        threshold: float,
        count: int,
    ) -> list[DocumentMatch]:
        client = await self._get_client()
        payload = {
            "query_embedding": embedding,
            "match_threshold": threshold,
            "match_count": count,
        }

        try:
            response = await client.post(
                self._url(f"rpc/{self._settings.match_function}"),
                json=payload,
                headers=self._headers(caller),
            )
        except httpx.RequestError as e:
            raise SearchError(f"Search failed: {e}") from e

        if response.is_error:
            message = _error_message(response)
            logger.error(
                f"Search error: {message}",
                extra={"status": response.status_code},
            )
            raise SearchError(
                f"Search failed: {message}",
                details={"status_code": response.status_code},
            )

        try:
            rows = response.json() or []
            matches = [
                DocumentMatch(
                    id=row["id"],
                    title=row.get("title", ""),
                    content=row.get("content", ""),
                    similarity=clamp_similarity(float(row["similarity"])),
                    created_at=row.get("created_at"),
                )
                for row in rows
            ]
        except (KeyError, TypeError, ValueError) as e:
            raise SearchError(f"Search failed: invalid response: {e}") from e

        return matches[:count]

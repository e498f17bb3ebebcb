"""Tests for document API routes."""

from unittest.mock import MagicMock

import pytest
from httpx import AsyncClient

from docsearch.api.app import docsearch_exception_handler, get_status_code
from docsearch.api.envelope import cors_headers, error_response, get_allowed_origin, result_response
from docsearch.exceptions import AuthenticationError, ErrorCode, UpstreamError, ValidationError
from docsearch.handlers.models import IngestMetadata, IngestResponse
from docsearch.results import Err, Ok
from tests.fakes import (
    PRODUCTION_ORIGIN,
    InMemoryDocumentStore,
    LetterEmbeddingService,
    auth,
)

CONTENT = "Row level security keeps documents private to their owner."
ALLOWED = ["http://localhost:3000", PRODUCTION_ORIGIN]


class TestAllowedOrigin:
    """Tests for CORS origin selection."""

    def test_echoes_allowed_origin(self) -> None:
        assert get_allowed_origin(PRODUCTION_ORIGIN, ALLOWED) == PRODUCTION_ORIGIN

    def test_unknown_origin_gets_first_entry(self) -> None:
        assert get_allowed_origin("https://evil.example", ALLOWED) == "http://localhost:3000"

    def test_missing_origin_gets_first_entry(self) -> None:
        assert get_allowed_origin(None, ALLOWED) == "http://localhost:3000"

    def test_headers(self) -> None:
        headers = cors_headers(None, ALLOWED)
        assert headers["Access-Control-Allow-Headers"] == (
            "authorization, x-client-info, apikey, content-type"
        )
        assert "OPTIONS" in headers["Access-Control-Allow-Methods"]


class TestEnvelope:
    """Tests for response envelopes."""

    def test_error_without_metadata(self) -> None:
        response = error_response(Err(kind=ErrorCode.VALIDATION_ERROR, message="bad"))
        assert response.status_code == 400
        assert response.body == b'{"success":false,"error":"bad"}'

    def test_success_uses_camel_case(self) -> None:
        result = Ok(
            IngestResponse(
                document_id="1",
                metadata=IngestMetadata(tokens_used=3, embedding_dimensions=27),
            )
        )
        response = result_response(result, success_status=201)
        assert response.status_code == 201
        assert b'"documentId":"1"' in response.body
        assert b'"embeddingDimensions":27' in response.body

    def test_numeric_document_id_stays_numeric(self) -> None:
        result = Ok(
            IngestResponse(
                document_id=123,
                metadata=IngestMetadata(tokens_used=3, embedding_dimensions=27),
            )
        )
        assert b'"documentId":123' in result_response(result, success_status=201).body


class TestIngestEndpoint:
    """Tests for POST /api/v1/documents."""

    @pytest.mark.asyncio
    async def test_created(self, client: AsyncClient, store: InMemoryDocumentStore) -> None:
        response = await client.post(
            "/api/v1/documents",
            json={"title": "Security", "content": CONTENT},
            headers=auth(),
        )

        assert response.status_code == 201
        data = response.json()
        assert data["success"] is True
        assert data["documentId"] == store.documents[0]["id"]
        assert data["message"] == "Document created successfully"
        assert data["metadata"] == {
            "tokensUsed": len(CONTENT.split()),
            "embeddingDimensions": LetterEmbeddingService.DIMENSIONS,
        }

    @pytest.mark.asyncio
    async def test_validation_failure(self, client: AsyncClient) -> None:
        response = await client.post(
            "/api/v1/documents",
            json={"title": "T", "content": "short"},
            headers=auth(),
        )

        assert response.status_code == 400
        assert response.json() == {
            "success": False,
            "error": "Content must be at least 10 characters long",
        }

    @pytest.mark.asyncio
    async def test_missing_authorization(self, client: AsyncClient) -> None:
        response = await client.post(
            "/api/v1/documents",
            json={"title": "T", "content": CONTENT},
        )

        assert response.status_code == 400
        assert response.json()["error"] == "Missing authorization header"

    @pytest.mark.asyncio
    async def test_invalid_json(self, client: AsyncClient) -> None:
        response = await client.post(
            "/api/v1/documents",
            content=b"{not json",
            headers={**auth(), "Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json()["error"] == "Request body must be a JSON object"

    @pytest.mark.asyncio
    async def test_provider_failure(
        self,
        client: AsyncClient,
        embedder: LetterEmbeddingService,
        store: InMemoryDocumentStore,
    ) -> None:
        embedder.fail_with = UpstreamError("Embedding provider error: 500", status_code=500)

        response = await client.post(
            "/api/v1/documents",
            json={"title": "T", "content": CONTENT},
            headers=auth(),
        )

        assert response.status_code == 400
        assert response.json() == {"success": False, "error": "Embedding provider error: 500"}
        assert store.documents == []


class TestSearchEndpoint:
    """Tests for POST /api/v1/search."""

    @pytest.mark.asyncio
    async def test_search(self, client: AsyncClient) -> None:
        created = await client.post(
            "/api/v1/documents",
            json={"title": "Security", "content": CONTENT},
            headers=auth(),
        )

        response = await client.post(
            "/api/v1/search",
            json={"query": CONTENT, "matchThreshold": 0.9, "matchCount": 5},
            headers=auth(),
        )

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert [r["id"] for r in data["results"]] == [created.json()["documentId"]]
        result = data["results"][0]
        assert set(result) == {"id", "title", "content", "similarity", "created_at"}
        assert result["similarity"] == 1.0
        metadata = data["metadata"]
        assert metadata["resultCount"] == 1
        assert metadata["matchThreshold"] == 0.9
        assert metadata["matchCount"] == 5
        assert metadata["queryTokens"] == len(CONTENT.split())
        assert metadata["executionTime"].endswith("ms")

    @pytest.mark.asyncio
    async def test_empty_results(self, client: AsyncClient) -> None:
        response = await client.post(
            "/api/v1/search",
            json={"query": "nothing stored yet"},
            headers=auth(),
        )

        assert response.status_code == 200
        assert response.json()["results"] == []

    @pytest.mark.asyncio
    async def test_failure_envelope(self, client: AsyncClient) -> None:
        response = await client.post(
            "/api/v1/search",
            json={"query": "q", "matchCount": 51},
            headers=auth(),
        )

        assert response.status_code == 400
        data = response.json()
        assert data["success"] is False
        assert "between 1 and 50" in data["error"]
        assert data["metadata"]["executionTime"].endswith("ms")

    @pytest.mark.asyncio
    async def test_provider_failure(
        self,
        client: AsyncClient,
        embedder: LetterEmbeddingService,
        store: InMemoryDocumentStore,
    ) -> None:
        embedder.fail_with = UpstreamError("Embedding provider error: 500", status_code=500)

        response = await client.post(
            "/api/v1/search",
            json={"query": "hello"},
            headers=auth(),
        )

        assert response.status_code == 400
        assert response.json()["error"] == "Embedding provider error: 500"
        assert store.match_calls == 0

    @pytest.mark.asyncio
    async def test_cross_tenant(self, client: AsyncClient) -> None:
        await client.post(
            "/api/v1/documents",
            json={"title": "Alice", "content": CONTENT},
            headers=auth("token-alice"),
        )

        response = await client.post(
            "/api/v1/search",
            json={"query": CONTENT, "matchThreshold": 0, "userId": "user-alice"},
            headers=auth("token-bob"),
        )

        assert response.status_code == 200
        assert response.json()["results"] == []


class TestCORS:
    """Tests for CORS handling."""

    @pytest.mark.asyncio
    async def test_preflight_allowed_origin(self, client: AsyncClient) -> None:
        response = await client.options(
            "/api/v1/search",
            headers={"Origin": PRODUCTION_ORIGIN, "Access-Control-Request-Method": "POST"},
        )

        assert response.status_code == 200
        assert response.text == "ok"
        assert response.headers["access-control-allow-origin"] == PRODUCTION_ORIGIN

    @pytest.mark.asyncio
    async def test_preflight_unknown_origin(self, client: AsyncClient) -> None:
        response = await client.options(
            "/api/v1/documents",
            headers={"Origin": "https://evil.example"},
        )

        assert response.headers["access-control-allow-origin"] == "http://localhost:3000"

    @pytest.mark.asyncio
    async def test_headers_on_error_response(self, client: AsyncClient) -> None:
        response = await client.post(
            "/api/v1/search",
            json={"query": ""},
            headers={**auth(), "Origin": PRODUCTION_ORIGIN},
        )

        assert response.status_code == 400
        assert response.headers["access-control-allow-origin"] == PRODUCTION_ORIGIN


class TestExceptionHandler:
    """Tests for the fallback DocSearchError handler."""

    def test_status_codes(self) -> None:
        assert get_status_code(ErrorCode.VALIDATION_ERROR) == 400
        assert get_status_code(ErrorCode.AUTHENTICATION_REQUIRED) == 401
        assert get_status_code(ErrorCode.EMBEDDING_TIMEOUT) == 504
        assert get_status_code(ErrorCode.EMBEDDING_SERVICE_ERROR) == 502
        assert get_status_code(ErrorCode.PERSISTENCE_ERROR) == 500

    @pytest.mark.asyncio
    async def test_handler_response(self) -> None:
        request = MagicMock()
        request.url.path = "/api/v1/search"

        response = await docsearch_exception_handler(
            request, AuthenticationError("Invalid authentication token")
        )

        assert response.status_code == 401
        assert b'"success":false' in response.body
        assert b'"code":"DS-2001"' in response.body

    @pytest.mark.asyncio
    async def test_handler_validation(self) -> None:
        request = MagicMock()
        request.url.path = "/x"

        response = await docsearch_exception_handler(request, ValidationError("bad"))

        assert response.status_code == 400

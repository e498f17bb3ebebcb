"""Pytest configuration and shared fixtures."""

from collections.abc import AsyncGenerator

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from docsearch.api.app import create_app
from docsearch.api.dependencies import Services
from docsearch.config import CORSSettings, Settings
from tests.fakes import (
    PRODUCTION_ORIGIN,
    InMemoryDocumentStore,
    LetterEmbeddingService,
    StaticIdentityVerifier,
)


@pytest.fixture
def verifier() -> StaticIdentityVerifier:
    return StaticIdentityVerifier()


@pytest.fixture
def embedder() -> LetterEmbeddingService:
    return LetterEmbeddingService()


@pytest.fixture
def store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()


@pytest.fixture
def services(
    verifier: StaticIdentityVerifier,
    embedder: LetterEmbeddingService,
    store: InMemoryDocumentStore,
) -> Services:
    return Services(verifier=verifier, embedding_service=embedder, store=store)


@pytest.fixture
def settings() -> Settings:
    return Settings(cors=CORSSettings(allowed_origin=PRODUCTION_ORIGIN))


@pytest.fixture
def app(settings: Settings, services: Services) -> FastAPI:
    return create_app(settings=settings, services=services)


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Create async test client for the FastAPI app.

    Yields:
        AsyncClient configured for testing.
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

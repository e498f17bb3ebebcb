"""Tests for application configuration."""

import os
from unittest.mock import patch

from docsearch.config import (
    AuthSettings,
    CORSSettings,
    EmbeddingSettings,
    Environment,
    PostgRESTSettings,
    QdrantSettings,
    Settings,
    StoreBackend,
    get_settings,
)


class TestEmbeddingSettings:
    """Tests for embedding configuration."""

    def test_default_values(self) -> None:
        """Defaults target the OpenAI small embedding model."""
        settings = EmbeddingSettings()
        assert settings.base_url == "https://api.openai.com/v1"
        assert settings.model == "text-embedding-3-small"
        assert settings.dimensions == 1536
        assert settings.timeout == 10.0

    def test_api_key_is_secret(self) -> None:
        """API key should be masked when printed."""
        with patch.dict(os.environ, {"EMBEDDING_API_KEY": "sk-test"}):
            settings = EmbeddingSettings()
            assert settings.api_key is not None
            assert "sk-test" not in str(settings.api_key)
            assert settings.api_key.get_secret_value() == "sk-test"

    def test_env_override(self) -> None:
        """Environment variables override defaults."""
        with patch.dict(os.environ, {"EMBEDDING_DIMENSIONS": "3072"}):
            settings = EmbeddingSettings()
            assert settings.dimensions == 3072


class TestAuthSettings:
    """Tests for identity provider configuration."""

    def test_default_values(self) -> None:
        """Defaults point at a local auth server."""
        settings = AuthSettings()
        assert settings.url == "http://localhost:54321/auth/v1"
        assert settings.api_key is None

    def test_env_override(self) -> None:
        """Environment variables override defaults."""
        with patch.dict(os.environ, {"AUTH_URL": "https://auth.example.com"}):
            assert AuthSettings().url == "https://auth.example.com"


class TestStoreSettings:
    """Tests for datastore configuration."""

    def test_qdrant_defaults(self) -> None:
        """Default values for Qdrant."""
        settings = QdrantSettings()
        assert settings.url == "http://localhost:6333"
        assert settings.api_key is None
        assert settings.collection_name == "documents"

    def test_qdrant_api_key_is_secret_when_set(self) -> None:
        """API key should be masked when set."""
        with patch.dict(os.environ, {"QDRANT_API_KEY": "secret-key"}):
            settings = QdrantSettings()
            assert settings.api_key is not None
            assert "secret-key" not in str(settings.api_key)
            assert settings.api_key.get_secret_value() == "secret-key"

    def test_postgrest_defaults(self) -> None:
        """Default values for PostgREST."""
        settings = PostgRESTSettings()
        assert settings.table == "documents"
        assert settings.match_function == "match_documents"


class TestCORSSettings:
    """Tests for cross-origin configuration."""

    def test_development_origin_only_by_default(self) -> None:
        """Only the local origin is allowed without configuration."""
        assert CORSSettings().allowed_origins == ["http://localhost:3000"]

    def test_production_origin_appended(self) -> None:
        """Configured production origin follows the development origin."""
        with patch.dict(os.environ, {"CORS_ALLOWED_ORIGIN": "https://app.example.com"}):
            settings = CORSSettings()
            assert settings.allowed_origins == [
                "http://localhost:3000",
                "https://app.example.com",
            ]


class TestSettings:
    """Tests for main application settings."""

    def test_default_environment(self) -> None:
        """Default environment is development."""
        settings = Settings()
        assert settings.environment == Environment.DEVELOPMENT

    def test_default_api_settings(self) -> None:
        """Default API host and port."""
        settings = Settings()
        assert settings.api_host == "0.0.0.0"
        assert settings.api_port == 8000

    def test_default_store_backend(self) -> None:
        """Qdrant is the default store."""
        assert Settings().store_backend == StoreBackend.QDRANT

    def test_nested_settings_loaded(self) -> None:
        """Nested settings are initialized."""
        settings = Settings()
        assert isinstance(settings.embedding, EmbeddingSettings)
        assert isinstance(settings.auth, AuthSettings)
        assert isinstance(settings.qdrant, QdrantSettings)
        assert isinstance(settings.postgrest, PostgRESTSettings)
        assert isinstance(settings.cors, CORSSettings)

    def test_environment_enum(self) -> None:
        """Environment can be set via string."""
        with patch.dict(os.environ, {"ENVIRONMENT": "production"}):
            settings = Settings()
            assert settings.environment == Environment.PRODUCTION

    def test_store_backend_from_env(self) -> None:
        """Store backend can be set via string."""
        with patch.dict(os.environ, {"STORE_BACKEND": "postgrest"}):
            assert Settings().store_backend == StoreBackend.POSTGREST


class TestGetSettings:
    """Tests for settings singleton."""

    def test_returns_settings_instance(self) -> None:
        """get_settings returns a Settings instance."""
        get_settings.cache_clear()
        settings = get_settings()
        assert isinstance(settings, Settings)

    def test_caching(self) -> None:
        """Settings are cached."""
        get_settings.cache_clear()
        settings1 = get_settings()
        settings2 = get_settings()
        assert settings1 is settings2

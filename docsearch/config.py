"""Application configuration using Pydantic Settings.

All configuration is loaded from environment variables.
No secrets are hardcoded.
"""

from enum import Enum
from functools import lru_cache

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    """Application environment."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class StoreBackend(str, Enum):
    """Document store implementation."""

    QDRANT = "qdrant"
    POSTGREST = "postgrest"


class EmbeddingSettings(BaseSettings):
    """Embedding provider configuration.

    Targets any OpenAI-compatible ``/embeddings`` endpoint.
    """

    model_config = SettingsConfigDict(env_prefix="EMBEDDING_")

    base_url: str = Field(
        default="https://api.openai.com/v1",
        description="Embedding API base URL",
    )
    model: str = Field(
        default="text-embedding-3-small",
        description="Embedding model name",
    )
    api_key: SecretStr | None = Field(
        default=None,
        description="Embedding provider API key",
    )
    dimensions: int = Field(
        default=1536,
        gt=0,
        description="Expected vector length produced by the model",
    )
    timeout: float = Field(
        default=10.0,
        description="Request timeout in seconds",
    )


class AuthSettings(BaseSettings):
    """Identity provider configuration."""

    model_config = SettingsConfigDict(env_prefix="AUTH_")

    url: str = Field(
        default="http://localhost:54321/auth/v1",
        description="Identity provider base URL",
    )
    api_key: SecretStr | None = Field(
        default=None,
        description="Project API key sent alongside user tokens",
    )
    timeout: float = Field(
        default=5.0,
        description="Request timeout in seconds",
    )


class QdrantSettings(BaseSettings):
    """Qdrant vector database configuration."""

    model_config = SettingsConfigDict(env_prefix="QDRANT_")

    url: str = Field(
        default="http://localhost:6333",
        description="Qdrant server URL",
    )
    api_key: SecretStr | None = Field(
        default=None,
        description="Qdrant API key (optional for local)",
    )
    collection_name: str = Field(
        default="documents",
        description="Collection holding document vectors",
    )


class PostgRESTSettings(BaseSettings):
    """PostgREST datastore configuration."""

    model_config = SettingsConfigDict(env_prefix="POSTGREST_")

    url: str = Field(
        default="http://localhost:54321/rest/v1",
        description="PostgREST base URL",
    )
    api_key: SecretStr | None = Field(
        default=None,
        description="Project API key sent alongside user tokens",
    )
    table: str = Field(
        default="documents",
        description="Documents table name",
    )
    match_function: str = Field(
        default="match_documents",
        description="Similarity search RPC name",
    )
    timeout: float = Field(
        default=10.0,
        description="Request timeout in seconds",
    )


class CORSSettings(BaseSettings):
    """Cross-origin configuration."""

    model_config = SettingsConfigDict(env_prefix="CORS_")

    development_origin: str = Field(
        default="http://localhost:3000",
        description="Local development origin, always allowed",
    )
    allowed_origin: str | None = Field(
        default=None,
        description="Production origin",
    )

    @property
    def allowed_origins(self) -> list[str]:
        """Allow-list in priority order."""
        return [o for o in (self.development_origin, self.allowed_origin) if o]


class Settings(BaseSettings):
    """Main application settings.

    Aggregates all configuration sections.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application settings
    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Application environment",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )

    # API settings
    api_host: str = Field(
        default="0.0.0.0",
        description="API server host",
    )
    api_port: int = Field(
        default=8000,
        description="API server port",
    )

    store_backend: StoreBackend = Field(
        default=StoreBackend.QDRANT,
        description="Document store implementation",
    )

    # Nested settings
    embedding: EmbeddingSettings = Field(default_factory=EmbeddingSettings)
    auth: AuthSettings = Field(default_factory=AuthSettings)
    qdrant: QdrantSettings = Field(default_factory=QdrantSettings)
    postgrest: PostgRESTSettings = Field(default_factory=PostgRESTSettings)
    cors: CORSSettings = Field(default_factory=CORSSettings)


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Only entry points should call this; everything else receives
    settings explicitly.

    Returns:
        Settings instance loaded from environment.
    """
    return Settings()

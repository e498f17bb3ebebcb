"""Request and response models for the handlers.

Request models validate locally and raise ``ValidationError`` with a
client-facing message. Response models serialize to camelCase.
"""

import math
from typing import Any, Self

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from docsearch.documents.models import DocumentMatch
from docsearch.exceptions import ValidationError

TITLE_MAX_LENGTH = 200
CONTENT_MIN_LENGTH = 10
CONTENT_MAX_LENGTH = 8000
QUERY_MAX_LENGTH = 500

DEFAULT_MATCH_THRESHOLD = 0.5
DEFAULT_MATCH_COUNT = 10
MAX_MATCH_COUNT = 50


def _first_error_message(exc: PydanticValidationError) -> str:
    error = exc.errors()[0]
    cause = error.get("ctx", {}).get("error")
    if isinstance(cause, ValueError):
        return str(cause)
    field = ".".join(str(part) for part in error["loc"])
    return f"{field}: {error['msg']}" if field else error["msg"]


class _RequestModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @classmethod
    def from_body(cls, body: Any) -> Self:
        """Validate a decoded JSON body.

        Raises:
            ValidationError: If the body is not an object or a field is invalid.
        """
        if not isinstance(body, dict):
            raise ValidationError("Request body must be a JSON object")
        try:
            return cls.model_validate(body)
        except PydanticValidationError as e:
            error = e.errors()[0]
            raise ValidationError(
                _first_error_message(e),
                details={"field": ".".join(str(part) for part in error["loc"])},
            ) from e


class IngestRequest(_RequestModel):
    """Body of a document ingestion request."""

    title: str = Field(default=None, validate_default=True, max_length=TITLE_MAX_LENGTH)
    content: str = Field(default=None, validate_default=True)

    @field_validator("title", mode="before")
    @classmethod
    def _check_title(cls, value: Any) -> str:
        if not isinstance(value, str) or not value.strip():
            raise ValueError("Title is required and must be a non-empty string")
        value = value.strip()
        if len(value) > TITLE_MAX_LENGTH:
            raise ValueError(f"Title must be at most {TITLE_MAX_LENGTH} characters")
        return value

    @field_validator("content", mode="before")
    @classmethod
    def _check_content(cls, value: Any) -> str:
        if not isinstance(value, str):
            raise ValueError("Content is required and must be a string")
        value = value.strip()
        if len(value) < CONTENT_MIN_LENGTH:
            raise ValueError(
                f"Content must be at least {CONTENT_MIN_LENGTH} characters long"
            )
        if len(value) > CONTENT_MAX_LENGTH:
            raise ValueError(
                f"Content must be at most {CONTENT_MAX_LENGTH} characters"
            )
        return value


class SearchRequest(_RequestModel):
    """Body of a semantic search request.

    Unknown fields, including any client-supplied user id, are dropped.
    """

    query: str = Field(default=None, validate_default=True)
    match_threshold: float = Field(
        default=DEFAULT_MATCH_THRESHOLD,
        alias="matchThreshold",
        ge=0.0,
        le=1.0,
    )
    match_count: int = Field(
        default=DEFAULT_MATCH_COUNT,
        alias="matchCount",
        ge=1,
        le=MAX_MATCH_COUNT,
    )

    @field_validator("query", mode="before")
    @classmethod
    def _check_query(cls, value: Any) -> str:
        if not isinstance(value, str) or not value.strip():
            raise ValueError("Query is required and must be a non-empty string")
        value = value.strip()
        if len(value) > QUERY_MAX_LENGTH:
            raise ValueError(f"Query must be at most {QUERY_MAX_LENGTH} characters")
        return value

    @field_validator("match_threshold", mode="before")
    @classmethod
    def _check_threshold(cls, value: Any) -> float:
        if value is None:
            return DEFAULT_MATCH_THRESHOLD
        if (
            isinstance(value, bool)
            or not isinstance(value, int | float)
            or not math.isfinite(value)
            or not 0.0 <= value <= 1.0
        ):
            raise ValueError("Match threshold must be between 0 and 1")
        return float(value)

    @field_validator("match_count", mode="before")
    @classmethod
    def _check_count(cls, value: Any) -> int:
        if value is None:
            return DEFAULT_MATCH_COUNT
        if isinstance(value, float) and value.is_integer():
            value = int(value)
        if (
            isinstance(value, bool)
            or not isinstance(value, int)
            or not 1 <= value <= MAX_MATCH_COUNT
        ):
            raise ValueError(
                f"Match count must be an integer between 1 and {MAX_MATCH_COUNT}"
            )
        return value


class _ResponseModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_body(self) -> dict[str, Any]:
        """Serialize for the JSON envelope."""
        return self.model_dump(mode="json", by_alias=True)


class IngestMetadata(_ResponseModel):
    """Usage data attached to an ingestion response."""

    tokens_used: int = Field(description="Tokens consumed by the embedding call")
    embedding_dimensions: int = Field(description="Stored vector length")


class IngestResponse(_ResponseModel):
    """Successful ingestion payload."""

    document_id: int | str = Field(description="New document identifier")
    message: str = Field(default="Document created successfully")
    metadata: IngestMetadata


class SearchMetadata(_ResponseModel):
    """Execution data attached to a search response."""

    query_tokens: int = Field(description="Tokens consumed embedding the query")
    result_count: int = Field(description="Number of results returned")
    execution_time: str = Field(description="Handler wall-clock time, e.g. '42ms'")
    match_threshold: float
    match_count: int


class SearchResponse(_ResponseModel):
    """Successful search payload."""

    results: list[DocumentMatch] = Field(default_factory=list)
    metadata: SearchMetadata

"""Document data models."""

from datetime import datetime

from pydantic import BaseModel, Field


class NewDocument(BaseModel):
    """A document ready to be persisted.

    Attributes:
        title: Document title.
        content: Document body.
        embedding: Embedding of the content.
    """

    title: str = Field(description="Document title")
    content: str = Field(description="Document body")
    embedding: list[float] = Field(description="Content embedding")


class DocumentRecord(BaseModel):
    """Identity of a persisted document."""

    id: int | str = Field(description="Document identifier")
    created_at: datetime | None = Field(default=None, description="Creation time")


class DocumentMatch(BaseModel):
    """A document returned by similarity search.

    Attributes:
        id: Document identifier.
        title: Document title.
        content: Document body.
        similarity: Cosine similarity in [0, 1], 1 meaning identical.
        created_at: Creation time.
    """

    id: int | str = Field(description="Document identifier")
    title: str = Field(description="Document title")
    content: str = Field(description="Document body")
    similarity: float = Field(ge=0.0, le=1.0, description="Similarity score")
    created_at: datetime | None = Field(default=None, description="Creation time")

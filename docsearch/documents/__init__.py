"""Document models."""

from docsearch.documents.models import DocumentMatch, DocumentRecord, NewDocument

__all__ = [
    "DocumentMatch",
    "DocumentRecord",
    "NewDocument",
]

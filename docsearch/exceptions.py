"""Application exception hierarchy.

All custom exceptions inherit from DocSearchError.
Each exception has an error code for structured error handling.
"""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Error codes for structured error handling."""

    # General errors (1xxx)
    INTERNAL_ERROR = "DS-1000"
    CONFIGURATION_ERROR = "DS-1001"
    VALIDATION_ERROR = "DS-1002"

    # Authentication errors (2xxx)
    AUTHENTICATION_REQUIRED = "DS-2000"
    AUTHENTICATION_INVALID = "DS-2001"

    # Upstream provider errors (3xxx)
    EMBEDDING_SERVICE_ERROR = "DS-3000"
    EMBEDDING_DIMENSION_MISMATCH = "DS-3001"
    EMBEDDING_TIMEOUT = "DS-3002"
    IDENTITY_SERVICE_ERROR = "DS-3003"

    # Datastore errors (4xxx)
    PERSISTENCE_ERROR = "DS-4000"
    SEARCH_ERROR = "DS-4001"
    COLLECTION_ERROR = "DS-4002"


class DocSearchError(Exception):
    """Base exception for all document search errors.

    Attributes:
        message: Human-readable error message.
        code: Structured error code.
        details: Additional error context.
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": {
                "code": self.code.value,
                "message": self.message,
                "details": self.details,
            }
        }


class ConfigurationError(DocSearchError):
    """Configuration or environment error."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, ErrorCode.CONFIGURATION_ERROR, details)


class ValidationError(DocSearchError):
    """Malformed or out-of-range request input."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, ErrorCode.VALIDATION_ERROR, details)


class AuthenticationError(DocSearchError):
    """Missing or rejected caller credential."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.AUTHENTICATION_INVALID,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, code, details)


class UpstreamError(DocSearchError):
    """External provider failure, timeout or non-success status.

    Attributes:
        status_code: HTTP status returned by the provider, if any.
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.EMBEDDING_SERVICE_ERROR,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.status_code = status_code
        details = dict(details or {})
        if status_code is not None:
            details.setdefault("status_code", status_code)
        super().__init__(message, code, details)


class PersistenceError(DocSearchError):
    """Datastore rejected a write."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.PERSISTENCE_ERROR,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, code, details)


class SearchError(DocSearchError):
    """Similarity search failed on the datastore side."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.SEARCH_ERROR,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, code, details)

"""Explicit handler outcomes.

Handlers never raise to their callers; they return either ``Ok`` wrapping
the response payload or ``Err`` describing the failure.
"""

from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from docsearch.exceptions import DocSearchError, ErrorCode

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Successful outcome."""

    value: T


@dataclass(frozen=True)
class Err:
    """Failed outcome.

    Attributes:
        kind: Error code classifying the failure.
        message: Human-readable message safe to return to clients.
        metadata: Observational data attached to the failure envelope.
    """

    kind: ErrorCode
    message: str
    metadata: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_exception(
        cls,
        exc: DocSearchError,
        metadata: dict[str, Any] | None = None,
    ) -> "Err":
        """Build an Err from an application exception."""
        return cls(kind=exc.code, message=exc.message, metadata=metadata or {})


Result = Ok[T] | Err

"""Caller identity verification."""

from docsearch.auth.models import Caller
from docsearch.auth.verifier import HTTPIdentityVerifier, IdentityVerifier, parse_bearer_token

__all__ = [
    "Caller",
    "HTTPIdentityVerifier",
    "IdentityVerifier",
    "parse_bearer_token",
]

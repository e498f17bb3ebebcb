"""Semantic document search service."""

__version__ = "0.1.0"

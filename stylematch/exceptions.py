"""
Error taxonomy for the matching engine.
"""
from typing import Any, Dict, Optional


class MatchingError(Exception):
    """Base class for errors raised by the matching engine."""


class ValidationError(MatchingError):
    """
    Malformed search request (caller's fault).

    Raised before any call to the vector store.
    """

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class RetrievalError(MatchingError):
    """
    Vector store unreachable, timed out, or query failed.

    Transient and safe to retry. Carries the shape of the failing query
    (dimension, limit, filter keys), never the vector itself.
    """

    def __init__(self, message: str, query_shape: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.query_shape = query_shape or {}

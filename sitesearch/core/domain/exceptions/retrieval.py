"""Retrieval exceptions for sitesearch."""

from .base import SiteSearchError


class RetrievalError(SiteSearchError):
    """Error during document retrieval."""

    error_code = "SS_RET_001"


class IndexNotFoundError(RetrievalError):
    """Persisted BM25 index is missing or unreadable."""

    error_code = "SS_RET_002"

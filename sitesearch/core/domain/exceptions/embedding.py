"""Embedding exceptions for sitesearch."""

from .base import SiteSearchError


class EmbeddingError(SiteSearchError):
    """Failed to generate embeddings."""

    error_code = "SS_EMB_001"


class EmbeddingAPIError(EmbeddingError):
    """Embedding API returned an error."""

    error_code = "SS_EMB_002"
    retryable = True


class EmbeddingRateLimitError(EmbeddingError):
    """Embedding API rate limit exceeded."""

    error_code = "SS_EMB_003"
    retryable = True


class EmbeddingTimeoutError(EmbeddingError):
    """Embedding request did not complete in time."""

    error_code = "SS_EMB_004"
    retryable = True

"""Custom exception hierarchy for sitesearch.

This package provides structured exceptions with automatic context capture.
Each exception includes:
- Error codes for quick identification
- Automatic capture of class, method, file, and line number
- Cause chaining for underlying exceptions
- A ``retryable`` flag for transient failures
- JSON serialization for structured logging

Import from this package directly:

    from sitesearch.core.domain.exceptions import SiteSearchError, PageFetchError
"""

# Base classes
from .base import ErrorOrigin, SiteSearchError

# Configuration exceptions
from .configuration import (
    ConfigurationError,
    InvalidConfigurationError,
    MissingAPIKeyError,
)

# Embedding exceptions
from .embedding import (
    EmbeddingAPIError,
    EmbeddingError,
    EmbeddingRateLimitError,
    EmbeddingTimeoutError,
)

# Ingestion exceptions
from .ingestion import (
    ContentExtractionError,
    IngestionError,
    PageFetchError,
    SitemapError,
)

# Retrieval exceptions
from .retrieval import (
    IndexNotFoundError,
    RetrievalError,
)

# Validation exceptions
from .validation import (
    EmptyQueryError,
    QueryTooLongError,
    ValidationError,
)

# Document store exceptions
from .vector_store import (
    DocumentStoreError,
    InvalidDocumentError,
    StoreConnectionError,
    StoreQueryError,
    StoreUpsertError,
)

__all__ = [
    # Base
    "ErrorOrigin",
    "SiteSearchError",
    # Configuration
    "ConfigurationError",
    "MissingAPIKeyError",
    "InvalidConfigurationError",
    # Document store
    "DocumentStoreError",
    "InvalidDocumentError",
    "StoreConnectionError",
    "StoreQueryError",
    "StoreUpsertError",
    # Embedding
    "EmbeddingError",
    "EmbeddingAPIError",
    "EmbeddingRateLimitError",
    "EmbeddingTimeoutError",
    # Ingestion
    "IngestionError",
    "SitemapError",
    "PageFetchError",
    "ContentExtractionError",
    # Validation
    "ValidationError",
    "EmptyQueryError",
    "QueryTooLongError",
    # Retrieval
    "RetrievalError",
    "IndexNotFoundError",
]

"""Document store exceptions for sitesearch."""

from .base import SiteSearchError


class DocumentStoreError(SiteSearchError):
    """Base error for document store operations."""

    error_code = "SS_VEC_001"


class StoreConnectionError(DocumentStoreError):
    """Failed to connect to the document store.

    Common causes:
    - Invalid URL or API key
    - Network connectivity issues
    - Qdrant service is down
    """

    error_code = "SS_VEC_002"
    retryable = True


class StoreQueryError(DocumentStoreError):
    """Failed to query the document store.

    Common causes:
    - Collection does not exist
    - Missing payload index for the filtered field
    - Embedding dimension mismatch
    """

    error_code = "SS_VEC_003"


class StoreUpsertError(DocumentStoreError):
    """Failed to write documents to the store."""

    error_code = "SS_VEC_004"
    retryable = True


class InvalidDocumentError(DocumentStoreError):
    """A document cannot be written as given, e.g. it has no embedding."""

    error_code = "SS_VEC_005"

"""Domain models for sitesearch.

- document: Document, SearchResult, RetrievalResult, SparseSearchResult, SearchHit
- ingestion: SitemapEntry, PageContent, IngestionReport

All models are re-exported here for convenient importing:

    from sitesearch.core.domain import Document, RetrievalResult
"""

from .document import Document, RetrievalResult, SearchHit, SearchResult, SparseSearchResult
from .ingestion import IngestionReport, PageContent, SitemapEntry

__all__ = [
    # Document models
    "Document",
    "SearchResult",
    "RetrievalResult",
    "SparseSearchResult",
    "SearchHit",
    # Ingestion models
    "SitemapEntry",
    "PageContent",
    "IngestionReport",
]

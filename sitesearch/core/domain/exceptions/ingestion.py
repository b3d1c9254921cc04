"""Ingestion exceptions for sitesearch."""

from .base import SiteSearchError


class IngestionError(SiteSearchError):
    """Error during sitemap ingestion."""

    error_code = "SS_ING_001"


class SitemapError(IngestionError):
    """Sitemap could not be loaded or parsed."""

    error_code = "SS_ING_002"


class PageFetchError(IngestionError):
    """Page could not be fetched (network failure or non-2xx status)."""

    error_code = "SS_ING_003"
    retryable = True


class ContentExtractionError(IngestionError):
    """Page markup could not be parsed into content blocks."""

    error_code = "SS_ING_004"

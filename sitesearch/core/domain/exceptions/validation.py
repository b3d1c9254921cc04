"""Validation exceptions for sitesearch."""

from .base import SiteSearchError


class ValidationError(SiteSearchError):
    """Input validation failed."""

    error_code = "SS_VAL_001"


class EmptyQueryError(ValidationError):
    """Query cannot be empty or whitespace only."""

    error_code = "SS_VAL_002"


class QueryTooLongError(ValidationError):
    """Query exceeds maximum allowed length."""

    error_code = "SS_VAL_003"

"""Common utilities shared across adapters and services.

- retry: exponential backoff for transient failures
- exception_handler: structured JSON formatting and HTTP status mapping
"""

from .exception_handler import (
    format_exception_json,
    get_error_code,
    get_http_status_code,
    log_exception,
)
from .retry import RetryPolicy, is_retryable, with_retry

__all__ = [
    # Retry
    "RetryPolicy",
    "is_retryable",
    "with_retry",
    # Exception handlers
    "format_exception_json",
    "get_error_code",
    "get_http_status_code",
    "log_exception",
]

"""Turning exceptions into structured JSON, log lines and HTTP statuses.

``SiteSearchError`` subclasses already know how to serialize themselves;
anything else is described from its traceback so API responses and log
entries share one shape.
"""

import json
import logging
import traceback
from typing import Any

from ..core.domain.exceptions import (
    ConfigurationError,
    DocumentStoreError,
    EmbeddingRateLimitError,
    SiteSearchError,
    ValidationError,
)
from .retry import is_retryable

logger = logging.getLogger(__name__)

GENERIC_ERROR_CODE = "PYTHON_ERR"

# First match wins, so subclasses come before their bases.
_STATUS_CODES: tuple[tuple[type[BaseException], int], ...] = (
    (ValidationError, 400),
    (EmbeddingRateLimitError, 429),
    (DocumentStoreError, 503),
    (ConfigurationError, 500),
    (SiteSearchError, 500),
    (ValueError, 400),
    (ConnectionError, 503),
    (TimeoutError, 503),
)


def _traceback_location(exc: BaseException) -> dict[str, Any]:
    frames = traceback.extract_tb(exc.__traceback__) if exc.__traceback__ else []
    if not frames:
        return {"class": "<unknown>", "method": "<unknown>", "file": "<unknown>", "line": 0}
    last = frames[-1]
    return {
        "class": "<unknown>",
        "method": last.name,
        "file": last.filename.replace("\\", "/").rsplit("/", 1)[-1],
        "line": last.lineno,
    }


def format_exception_json(
    exc: BaseException,
    include_trace: bool = False,
    extra_context: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Describe ``exc`` in the ``SiteSearchError.to_dict()`` shape.

    Args:
        exc: Any exception.
        include_trace: Add the formatted stack trace.
        extra_context: Merged into the ``context`` section.

    Returns:
        Dictionary with ``error`` and ``location`` sections, plus ``context``
        and ``stack_trace`` when present.
    """
    if isinstance(exc, SiteSearchError):
        result = exc.to_dict(include_trace=include_trace)
    else:
        result = {
            "error": {
                "type": type(exc).__name__,
                "code": GENERIC_ERROR_CODE,
                "message": str(exc),
                "retryable": is_retryable(exc),
            },
            "location": _traceback_location(exc),
        }
        if include_trace:
            lines = traceback.format_exception(type(exc), exc, exc.__traceback__)
            result["stack_trace"] = [line.rstrip() for line in lines if line.strip()]

    if extra_context:
        result.setdefault("context", {}).update(extra_context)
    return result


def log_exception(
    exc: BaseException,
    log: logging.Logger | None = None,
    level: int = logging.ERROR,
    extra_context: dict[str, Any] | None = None,
) -> None:
    """Log ``exc`` as one JSON document, stack trace included.

    Args:
        exc: The exception to log.
        log: Logger to write to; defaults to this module's logger.
        level: Log level.
        extra_context: Request details such as the URL being ingested.
    """
    payload = format_exception_json(exc, include_trace=True, extra_context=extra_context)
    (log or logger).log(level, json.dumps(payload, ensure_ascii=False, default=str))


def get_error_code(exc: BaseException) -> str:
    """``SS_*`` code for sitesearch errors, ``PYTHON_ERR`` otherwise."""
    return exc.error_code if isinstance(exc, SiteSearchError) else GENERIC_ERROR_CODE


def get_http_status_code(exc: BaseException) -> int:
    """HTTP status for ``exc``: 400, 429, 503, or 500 when nothing matches."""
    for exc_type, status in _STATUS_CODES:
        if isinstance(exc, exc_type):
            return status
    return 500

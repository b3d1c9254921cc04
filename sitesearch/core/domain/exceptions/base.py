"""Base exception for sitesearch.

Every sitesearch error carries:
- an error code (``SS_<AREA>_<NNN>``) for log searches and API clients
- the origin (class, function, file, line) where it was raised
- an optional cause and free-form context for debugging
- a ``retryable`` flag read by the ingestion retry policy
"""

import inspect
import traceback
from dataclasses import dataclass, field
from datetime import UTC, datetime
from types import FrameType
from typing import Any


@dataclass(frozen=True)
class ErrorOrigin:
    """Where an exception was constructed."""

    class_name: str
    method_name: str
    file_name: str
    line_number: int
    timestamp: str = field(default_factory=lambda: datetime.now(UTC).isoformat())

    @classmethod
    def from_frame(cls, frame: FrameType | None) -> "ErrorOrigin":
        if frame is None:
            return cls("<unknown>", "<unknown>", "<unknown>", 0)
        owner = frame.f_locals.get("self")
        return cls(
            class_name=type(owner).__name__ if owner is not None else "<module>",
            method_name=frame.f_code.co_name,
            file_name=frame.f_code.co_filename.replace("\\", "/").rsplit("/", 1)[-1],
            line_number=frame.f_lineno,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "class": self.class_name,
            "method": self.method_name,
            "file": self.file_name,
            "line": self.line_number,
            "timestamp": self.timestamp,
        }


def _raising_frame() -> FrameType | None:
    """First frame outside the exception constructors on the current stack."""
    frame = inspect.currentframe()
    while frame is not None:
        owner = frame.f_locals.get("self")
        if frame.f_code.co_name != "_raising_frame" and not isinstance(owner, SiteSearchError):
            return frame
        frame = frame.f_back
    return None


class SiteSearchError(Exception):
    """Base exception for all sitesearch errors.

    Example:
        try:
            await client.upsert(...)
        except Exception as e:
            raise StoreUpsertError(
                "Failed to upsert page chunks",
                cause=e,
                context={"url": page_url},
            ) from e
    """

    error_code: str = "SS_ERR_001"
    retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        cause: BaseException | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error message.
            cause: The underlying exception, if any.
            context: Extra key-value details (URL, collection, sizes...).
        """
        super().__init__(message)
        self.message = message
        self.cause = cause
        self.extra_context = dict(context or {})
        self.location = ErrorOrigin.from_frame(_raising_frame())
        self.stack_trace = "".join(traceback.format_exception(cause)) if cause else None

    def to_dict(self, include_trace: bool = False) -> dict[str, Any]:
        """Structured form used for API error bodies and JSON logs.

        Args:
            include_trace: Add the cause's stack trace (debug mode).

        Returns:
            ``error`` and ``location`` sections, plus ``context``, ``cause``
            and ``stack_trace`` when available.
        """
        result: dict[str, Any] = {
            "error": {
                "type": type(self).__name__,
                "code": self.error_code,
                "message": self.message,
                "retryable": self.retryable,
            },
            "location": self.location.to_dict(),
        }
        if self.extra_context:
            result["context"] = dict(self.extra_context)
        if self.cause is not None:
            result["cause"] = {"type": type(self.cause).__name__, "message": str(self.cause)}
        if include_trace and self.stack_trace:
            result["stack_trace"] = [line for line in self.stack_trace.splitlines() if line.strip()]
        return result

"""Pydantic models for API requests and responses."""

from pydantic import BaseModel, ConfigDict, Field


class SearchRequest(BaseModel):
    """Request model for a search."""

    query: str = Field(
        ...,
        description="Free-text search query",
        json_schema_extra={"example": "What are the opening hours of the visitor center?"},
    )


class SearchHitModel(BaseModel):
    """A result document returned by search."""

    text: str = Field(..., description="Chunk text")
    url: str = Field(..., description="Source page URL")
    score: float | None = Field(None, description="Fused RRF score")
    title: str | None = Field(None, description="Source page title")


class IngestRequest(BaseModel):
    """Request model for starting an ingestion run."""

    url: str = Field(..., min_length=1, description="Sitemap file path or URL")
    lang: str = Field(..., description="Language code")


class IngestAcceptedResponse(BaseModel):
    """Response model for an accepted ingestion run."""

    status: str = Field(default="accepted", description="Request status")
    url: str = Field(..., description="Sitemap being ingested")
    lang: str = Field(..., description="Language code")


class HealthResponse(BaseModel):
    """Response model for health check."""

    status: str = Field(..., description="Health status")
    version: str = Field(..., description="API version")
    document_store: str = Field(..., description="Document store status")


class ErrorDetail(BaseModel):
    """Structured error detail information."""

    type: str = Field(..., description="Exception type name")
    code: str = Field(..., description="Error code (e.g., SS_VEC_002)")
    message: str = Field(..., description="Human-readable error message")
    retryable: bool = Field(default=False, description="Whether retrying may succeed")


class ErrorLocation(BaseModel):
    """Source location where error occurred."""

    model_config = ConfigDict(populate_by_name=True)

    class_name: str = Field(..., alias="class", description="Class name or <module>")
    method: str = Field(..., description="Method/function name")
    file: str = Field(..., description="Source file name")
    line: int = Field(..., description="Line number")
    timestamp: str | None = Field(None, description="When the error occurred")


class ErrorResponse(BaseModel):
    """Response model for structured errors.

    Example:
        {
            "error": {"type": "EmptyQueryError", "code": "SS_VAL_002", "message": "..."},
            "location": {"class": "SearchService", "method": "search", ...},
            "context": {"path": "/api/v1/search"},
            "stack_trace": ["Traceback...", ...]  # Only in debug mode
        }
    """

    error: ErrorDetail = Field(..., description="Error details including type, code, and message")
    location: ErrorLocation = Field(..., description="Where the error was raised")
    context: dict | None = Field(None, description="Additional debugging context")
    stack_trace: list[str] | None = Field(None, description="Stack trace (debug mode only)")

"""Configuration management for sitesearch."""

import json
from pathlib import Path
from typing import Annotated, Any, Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from ..core.domain.exceptions import ConfigurationError, MissingAPIKeyError

SparseStrategy = Literal["containment", "bm25", "llm-keyword-extraction"]
AbsentRankMode = Literal["pre_rerank_k", "zero", "none"]


def _sanitize_secret(value: str) -> str:
    """Remove BOM characters and whitespace from secrets.

    Secrets mounted from files or copied from consoles may carry a BOM that
    breaks HTTP headers.
    """
    if not value:
        return value
    return value.lstrip("\ufeff").strip()


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Google AI API (embeddings and keyword extraction)
    google_api_key: str = ""

    # Qdrant settings
    qdrant_url: str = ""
    qdrant_api_key: str = ""
    qdrant_collection: str = "site_documents"
    qdrant_timeout_s: int = 30

    # Tenant every stored document and query is scoped to
    tenant_id: str = ""

    @field_validator("google_api_key", "qdrant_api_key", "qdrant_url", "tenant_id", mode="after")
    @classmethod
    def sanitize_secrets(cls, value: str) -> str:
        """Remove BOM and whitespace from secret values."""
        return _sanitize_secret(value)

    # Model settings
    embedding_model: str = "gemini-embedding-001"
    embedding_dimension: int = 1536
    embedding_timeout_s: float = 30.0
    keyword_model: str = "gemini-2.0-flash"

    # Ingestion settings
    ingestion_batch_size: int = 10
    ingestion_max_concurrency: int = 5
    ingestion_item_delay_ms: int = 200
    ingestion_batch_delay_ms: int = 1000
    ingestion_max_retries: int = 3
    ingestion_retry_base_delay_ms: int = 1000
    ingestion_retry_max_delay_ms: int = 30000
    chunk_min_length: int = 1000
    max_chunk_length: int = 2000
    chunk_overlap: int = 0
    content_selector: str = ".DCContentBlock"
    excluded_path_segments: Annotated[list[str], NoDecode] = ["/ar/", "/en/"]
    index_page_summary: bool = False
    http_timeout_s: float = 30.0

    @field_validator("excluded_path_segments", mode="before")
    @classmethod
    def split_segments(cls, value: Any) -> Any:
        """Accept ``/ar/,/en/`` as well as a JSON array."""
        if not isinstance(value, str):
            return value
        text = value.strip()
        if text.startswith("["):
            return json.loads(text)
        return [segment.strip() for segment in text.split(",") if segment.strip()]

    # Search settings
    search_top_k: int = 10
    search_pre_rerank_k: int = 10
    rrf_k: int = 60
    absent_rank_mode: AbsentRankMode = "pre_rerank_k"
    sparse_strategy: SparseStrategy = "containment"
    bm25_index_path: Path = Path("./data/bm25_index.json")
    retrieval_branch_timeout_s: float = 15.0
    max_query_length: int = 1000

    # Logging
    log_level: str = "INFO"
    log_json: bool = False
    log_file: Path | None = None
    debug: bool = False

    @model_validator(mode="after")
    def check_ranges(self) -> "Settings":
        """Reject inconsistent numeric settings at load time."""
        if self.max_chunk_length <= 0:
            raise ValueError("max_chunk_length must be positive")
        if not 0 <= self.chunk_min_length <= self.max_chunk_length:
            raise ValueError("chunk_min_length must be between 0 and max_chunk_length")
        if not 0 <= self.chunk_overlap < self.max_chunk_length:
            raise ValueError("chunk_overlap must be non-negative and below max_chunk_length")
        if self.ingestion_batch_size <= 0 or self.ingestion_max_concurrency <= 0:
            raise ValueError("ingestion batch size and concurrency must be positive")
        if self.search_top_k <= 0 or self.search_pre_rerank_k <= 0:
            raise ValueError("search_top_k and search_pre_rerank_k must be positive")
        if self.embedding_dimension <= 0:
            raise ValueError("embedding_dimension must be positive")
        return self

    def validate_required(self) -> None:
        """Fail fast when configuration needed at runtime is missing.

        Raises:
            MissingAPIKeyError: If the Google API key or Qdrant URL is not set.
            ConfigurationError: If no tenant id is configured.
        """
        if not self.google_api_key:
            raise MissingAPIKeyError(
                "GOOGLE_API_KEY is not set; it is required for embeddings",
                context={"setting": "google_api_key"},
            )
        if not self.qdrant_url:
            raise MissingAPIKeyError(
                "QDRANT_URL is not set",
                context={"setting": "qdrant_url"},
            )
        if not self.tenant_id:
            raise ConfigurationError(
                "TENANT_ID is not set; all documents and queries are tenant scoped",
                context={"setting": "tenant_id"},
            )


# Global settings instance
settings = Settings()

"""Document and search result models for the retrieval core."""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class Document:
    """A chunk of page text stored in the document store.

    One Document is created per text chunk per page during ingestion.
    Documents are replaced only by a full upsert of the same id.

    Attributes:
        id: Unique identifier assigned at ingestion time.
        tenant_id: Partition key; every store query is scoped to it.
        text: The chunk's text content.
        url: Location of the source page.
        title: Optional page title, shared by all chunks of the page.
        embedding: Dense vector; only populated on the write path.
    """

    id: str
    tenant_id: str
    text: str
    url: str
    title: str | None = None
    embedding: list[float] | None = field(default=None, repr=False)

    def to_payload(self) -> dict[str, Any]:
        """Store payload for this document (everything except the vector)."""
        return {
            "doc_id": self.id,
            "tenant_id": self.tenant_id,
            "text": self.text,
            "url": self.url,
            "title": self.title,
        }

    @classmethod
    def from_payload(cls, payload: dict[str, Any], point_id: Any = None) -> "Document":
        """Rebuild a document from a store payload."""
        return cls(
            id=str(payload.get("doc_id") or point_id or ""),
            tenant_id=payload.get("tenant_id", ""),
            text=payload.get("text", ""),
            url=payload.get("url", ""),
            title=payload.get("title") or None,
        )


@dataclass
class SearchResult:
    """A store hit with its raw relevance score.

    Attributes:
        document: The matched Document.
        score: Score reported by the store (cosine similarity for vector
            queries, higher is nearer).
    """

    document: Document
    score: float


@dataclass
class RetrievalResult:
    """A document annotated with its per-branch ranks and fused score.

    Attributes:
        document: The retrieved Document (first-seen record on merge).
        dense_rank: 0-based position in the dense list, None if absent.
        sparse_rank: 0-based position in the sparse list, None if absent.
        fused_score: RRF score; set only by the reranker.
    """

    document: Document
    dense_rank: int | None = None
    sparse_rank: int | None = None
    fused_score: float | None = None


@dataclass
class SparseSearchResult:
    """Outcome of a sparse search, including why it may be empty."""

    documents: list[Document]
    query: str
    engine: str
    error: str | None = None

    @property
    def retrieved_count(self) -> int:
        return len(self.documents)


@dataclass
class SearchHit:
    """Result document shape returned to callers of the search flow."""

    text: str
    url: str
    score: float | None = None
    title: str | None = None

    @classmethod
    def from_result(cls, result: RetrievalResult) -> "SearchHit":
        return cls(
            text=result.document.text,
            url=result.document.url,
            score=result.fused_score,
            title=result.document.title,
        )

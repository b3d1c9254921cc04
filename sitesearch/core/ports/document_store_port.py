"""Document Store Port Interface."""

from abc import ABC, abstractmethod

from ..domain import Document, SearchResult


class DocumentStorePort(ABC):
    """Abstract interface for the tenant-scoped document store.

    Every read is filtered to a single tenant. Documents carry their own
    ``tenant_id`` on write.
    """

    @abstractmethod
    async def ensure_collection(self) -> None:
        """Create the collection and its payload indexes if missing."""
        ...

    @abstractmethod
    async def upsert_many(self, documents: list[Document]) -> int:
        """Insert or replace documents keyed by id. Returns the number written."""
        ...

    @abstractmethod
    async def query_by_vector(
        self, embedding: list[float], k: int, tenant_id: str
    ) -> list[SearchResult]:
        """Nearest neighbours of ``embedding``, closest first."""
        ...

    @abstractmethod
    async def query_by_containment(self, text: str, k: int, tenant_id: str) -> list[Document]:
        """Documents whose text contains ``text`` as a word match."""
        ...

    @abstractmethod
    async def scroll_documents(self, tenant_id: str, batch_size: int = 256) -> list[Document]:
        """Every document stored for ``tenant_id``."""
        ...

    @abstractmethod
    async def count(self, tenant_id: str) -> int: ...

    @abstractmethod
    async def close(self) -> None: ...

"""Retriever Port Interfaces."""

from abc import ABC, abstractmethod

from ..domain import Document, SparseSearchResult


class DenseRetrieverPort(ABC):
    """Semantic retrieval over stored embeddings."""

    @abstractmethod
    async def retrieve(self, query: str, k: int) -> list[Document]:
        """Up to ``k`` documents, most similar first."""
        ...


class SparseRetrieverPort(ABC):
    """Lexical retrieval; implementations differ in how terms are matched."""

    name: str = "sparse"

    @abstractmethod
    async def search(self, query: str, k: int) -> SparseSearchResult:
        """Up to ``k`` documents, best lexical match first, with search metadata."""
        ...

    async def retrieve(self, query: str, k: int) -> list[Document]:
        result = await self.search(query, k)
        return result.documents

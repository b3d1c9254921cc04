"""
Pytest configuration and shared fixtures.
"""

import uuid

import pytest

from sitesearch.core.domain import Document, SearchResult
from sitesearch.core.ports.document_store_port import DocumentStorePort
from sitesearch.core.ports.embedding_port import EmbeddingPort
from sitesearch.core.ports.page_source_port import PageFetcherPort

TENANT = "tenant-a"
DIMENSION = 8


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests (no external dependencies)")
    config.addinivalue_line("markers", "integration: Integration tests (in-process app)")
    config.addinivalue_line("markers", "slow: Slow tests (network, large data)")


def make_document(text: str, tenant_id: str = TENANT, url: str | None = None, **kwargs) -> Document:
    """Build a Document with a fresh id."""
    return Document(
        id=str(uuid.uuid4()),
        tenant_id=tenant_id,
        text=text,
        url=url or f"https://example.com/{abs(hash(text)) % 10_000}",
        **kwargs,
    )


class FakeEmbedder(EmbeddingPort):
    """Deterministic embedder recording every call."""

    def __init__(self, dimension: int = DIMENSION) -> None:
        self.dimension = dimension
        self.document_calls: list[list[str]] = []
        self.query_calls: list[str] = []

    def _vector(self, text: str) -> list[float]:
        return [float((len(text) + i) % 7) / 7 for i in range(self.dimension)]

    async def embed_query(self, text: str) -> list[float]:
        self.query_calls.append(text)
        return self._vector(text)

    async def embed_documents(self, texts: list[str]) -> list[list[float]]:
        self.document_calls.append(list(texts))
        return [self._vector(t) for t in texts]


class InMemoryStore(DocumentStorePort):
    """Document store keeping documents in insertion order."""

    def __init__(self, documents: list[Document] | None = None) -> None:
        self.documents: dict[str, Document] = {d.id: d for d in documents or []}
        self.upsert_calls: list[list[Document]] = []
        self.containment_calls: list[str] = []
        self.ensured = False
        self.closed = False

    async def ensure_collection(self) -> None:
        self.ensured = True

    async def upsert_many(self, documents: list[Document]) -> int:
        self.upsert_calls.append(list(documents))
        for doc in documents:
            self.documents[doc.id] = doc
        return len(documents)

    def _tenant_docs(self, tenant_id: str) -> list[Document]:
        return [d for d in self.documents.values() if d.tenant_id == tenant_id]

    async def query_by_vector(
        self, embedding: list[float], k: int, tenant_id: str
    ) -> list[SearchResult]:
        docs = self._tenant_docs(tenant_id)[:k]
        return [SearchResult(document=d, score=1.0 - i * 0.01) for i, d in enumerate(docs)]

    async def query_by_containment(self, text: str, k: int, tenant_id: str) -> list[Document]:
        self.containment_calls.append(text)
        needle = text.lower()
        return [d for d in self._tenant_docs(tenant_id) if needle in d.text.lower()][:k]

    async def scroll_documents(self, tenant_id: str, batch_size: int = 256) -> list[Document]:
        return self._tenant_docs(tenant_id)

    async def count(self, tenant_id: str) -> int:
        return len(self._tenant_docs(tenant_id))

    async def close(self) -> None:
        self.closed = True


class FakeFetcher(PageFetcherPort):
    """Serves pages from a dict; a value that is an exception is raised."""

    def __init__(self, pages: dict[str, object]) -> None:
        self.pages = pages
        self.calls: list[str] = []

    async def fetch(self, url: str) -> str:
        self.calls.append(url)
        page = self.pages[url]
        if isinstance(page, BaseException):
            raise page
        return str(page)


class SleepRecorder:
    """Awaitable stand-in for asyncio.sleep that records delays."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture
def embedder():
    return FakeEmbedder()


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def sleep_recorder():
    return SleepRecorder()


@pytest.fixture
def make_doc():
    """Factory for Documents of the default test tenant."""
    return make_document


@pytest.fixture
def store_factory():
    """Build an InMemoryStore preloaded with documents."""
    return InMemoryStore


@pytest.fixture
def fetcher_factory():
    """Build a FakeFetcher from a url -> html (or exception) mapping."""
    return FakeFetcher

"""Sparse (lexical) retrieval strategies.

Three interchangeable strategies, selected per deployment:

- containment: store-side case-insensitive word match on chunk text
- bm25: in-memory BM25 over a prebuilt index file
- llm-keyword-extraction: an LLM picks keywords, each runs a containment
  search and the per-keyword lists are fused with RRF
"""

import asyncio
import logging
from abc import abstractmethod
from pathlib import Path

from ..domain import Document, SparseSearchResult
from ..domain.exceptions import RetrievalError
from ..ports.document_store_port import DocumentStorePort
from ..ports.keyword_extractor_port import KeywordExtractorPort
from ..ports.retriever_port import SparseRetrieverPort
from .bm25_index import BM25Index
from .reranker import fuse_ranked_lists

logger = logging.getLogger(__name__)

EMPTY_QUERY_ERROR = "Empty query text"


class BaseSparseRetriever(SparseRetrieverPort):
    """Shared query handling: blank queries return an empty result untouched."""

    async def search(self, query: str, k: int) -> SparseSearchResult:
        text = query.strip() if query else ""
        if not text:
            logger.debug("%s search skipped: empty query", self.name)
            return SparseSearchResult(
                documents=[], query=query or "", engine=self.name, error=EMPTY_QUERY_ERROR
            )

        documents = await self._search(text, k)
        logger.info(
            "%s search retrieved %d documents",
            self.name,
            len(documents),
            extra={"strategy": self.name},
        )
        return SparseSearchResult(documents=documents, query=query, engine=self.name)

    @abstractmethod
    async def _search(self, query: str, k: int) -> list[Document]: ...


class ContainmentSparseRetriever(BaseSparseRetriever):
    """Case-insensitive text match in the document store."""

    name = "containment"

    def __init__(self, store: DocumentStorePort, tenant_id: str) -> None:
        self.store = store
        self.tenant_id = tenant_id

    async def _search(self, query: str, k: int) -> list[Document]:
        return await self.store.query_by_containment(query, k, self.tenant_id)


class BM25SparseRetriever(BaseSparseRetriever):
    """BM25 scoring over an index file loaded once on first use."""

    name = "bm25"

    def __init__(self, index_path: Path, tenant_id: str) -> None:
        self.index_path = Path(index_path)
        self.tenant_id = tenant_id
        self._index: BM25Index | None = None
        self._lock = asyncio.Lock()

    async def _get_index(self) -> BM25Index:
        if self._index is None:
            async with self._lock:
                if self._index is None:
                    self._index = await asyncio.to_thread(BM25Index.load, self.index_path)
        return self._index

    def reset(self) -> None:
        """Drop the loaded index so the next search reloads the file."""
        self._index = None

    async def _search(self, query: str, k: int) -> list[Document]:
        index = await self._get_index()
        hits = index.search(query, len(index))
        return [doc for doc, _score in hits if doc.tenant_id == self.tenant_id][:k]


class KeywordExtractionSparseRetriever(BaseSparseRetriever):
    """Containment search per LLM-extracted keyword, fused with RRF."""

    name = "llm-keyword-extraction"

    def __init__(
        self,
        extractor: KeywordExtractorPort,
        store: DocumentStorePort,
        tenant_id: str,
    ) -> None:
        self.extractor = extractor
        self.store = store
        self.tenant_id = tenant_id

    async def _keywords(self, query: str) -> list[str]:
        try:
            keywords = await self.extractor.extract_keywords(query)
        except RetrievalError as e:
            logger.warning("Keyword extraction failed, searching the full query: %s", e)
            return [query]
        return keywords or [query]

    async def _search(self, query: str, k: int) -> list[Document]:
        keywords = await self._keywords(query)
        logger.debug("Searching keywords %s", keywords)
        per_keyword = await asyncio.gather(
            *(self.store.query_by_containment(keyword, k, self.tenant_id) for keyword in keywords)
        )
        return [doc for doc, _score in fuse_ranked_lists(per_keyword, k)]

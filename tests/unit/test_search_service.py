"""Unit tests for the search flow and dense retrieval."""

from unittest.mock import AsyncMock

import pytest

from sitesearch.core.domain import RetrievalResult
from sitesearch.core.domain.exceptions import EmptyQueryError, QueryTooLongError, StoreQueryError
from sitesearch.core.services.dense_retriever import DenseRetriever
from sitesearch.core.services.hybrid_retriever import HybridRetriever
from sitesearch.core.services.search_service import SearchService

pytestmark = pytest.mark.unit

TENANT = "tenant-a"


class TestDenseRetriever:
    async def test_embeds_query_and_returns_documents(self, embedder, store_factory, make_doc):
        docs = [make_doc("Opening hours"), make_doc("Tickets"), make_doc("Parking")]
        store = store_factory(docs + [make_doc("Other tenant", tenant_id="tenant-b")])
        retriever = DenseRetriever(embedder, store, TENANT)

        results = await retriever.retrieve("when do you open", k=2)

        assert embedder.query_calls == ["when do you open"]
        assert [d.text for d in results] == ["Opening hours", "Tickets"]

    async def test_store_errors_propagate(self, embedder, store):
        store.query_by_vector = AsyncMock(side_effect=StoreQueryError("down"))
        retriever = DenseRetriever(embedder, store, TENANT)

        with pytest.raises(StoreQueryError):
            await retriever.retrieve("q", k=5)


@pytest.fixture
def retriever():
    mock = AsyncMock(spec=HybridRetriever)
    mock.retrieve.return_value = []
    return mock


class TestSearchService:
    async def test_passes_configured_sizes(self, retriever):
        service = SearchService(retriever, top_k=3, pre_rerank_k=20)

        await service.search("  museum hours  ")

        retriever.retrieve.assert_awaited_once_with("museum hours", k=3, pre_rerank_k=20)

    async def test_results_mapped_to_hits(self, retriever, make_doc):
        doc = make_doc("Opening hours", title="Visit", url="https://example.com/he/visit")
        retriever.retrieve.return_value = [
            RetrievalResult(document=doc, dense_rank=0, fused_score=0.03)
        ]

        hits = await SearchService(retriever).search("hours")

        assert len(hits) == 1
        assert hits[0].text == "Opening hours"
        assert hits[0].url == "https://example.com/he/visit"
        assert hits[0].title == "Visit"
        assert hits[0].score == 0.03

    async def test_no_results_is_empty_list(self, retriever):
        assert await SearchService(retriever).search("nothing") == []

    @pytest.mark.parametrize("query", ["", "   ", None])
    async def test_empty_query_rejected(self, retriever, query):
        with pytest.raises(EmptyQueryError):
            await SearchService(retriever).search(query)
        retriever.retrieve.assert_not_called()

    async def test_long_query_rejected(self, retriever):
        service = SearchService(retriever, max_query_length=10)

        with pytest.raises(QueryTooLongError) as exc_info:
            await service.search("x" * 11)

        assert exc_info.value.extra_context["length"] == 11

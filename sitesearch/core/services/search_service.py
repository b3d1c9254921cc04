"""Search flow: validated queries through the hybrid retriever."""

import logging

from ..domain import SearchHit
from ..domain.exceptions import EmptyQueryError, QueryTooLongError
from .hybrid_retriever import HybridRetriever

logger = logging.getLogger(__name__)


class SearchService:
    """Thin wrapper running the hybrid retriever with fixed result sizes."""

    def __init__(
        self,
        retriever: HybridRetriever,
        top_k: int = 10,
        pre_rerank_k: int = 10,
        max_query_length: int = 1000,
    ) -> None:
        self.retriever = retriever
        self.top_k = top_k
        self.pre_rerank_k = pre_rerank_k
        self.max_query_length = max_query_length

    async def search(self, query: str) -> list[SearchHit]:
        """Search for ``query``.

        Returns:
            Result documents, best first; possibly empty, never None.

        Raises:
            EmptyQueryError: If the query is blank.
            QueryTooLongError: If the query exceeds ``max_query_length``.
        """
        text = query.strip() if query else ""
        if not text:
            raise EmptyQueryError("Query must not be empty")
        if len(text) > self.max_query_length:
            raise QueryTooLongError(
                f"Query exceeds {self.max_query_length} characters",
                context={"length": len(text), "max_length": self.max_query_length},
            )

        results = await self.retriever.retrieve(text, k=self.top_k, pre_rerank_k=self.pre_rerank_k)
        return [SearchHit.from_result(result) for result in results]

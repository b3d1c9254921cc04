"""Hybrid retrieval: dense and sparse branches fused with RRF."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Literal

from ..domain import Document, RetrievalResult
from ..domain.utils import content_identity
from ..ports.retriever_port import DenseRetrieverPort, SparseRetrieverPort
from .reranker import RRFusionReranker

logger = logging.getLogger(__name__)

AbsentRankMode = Literal["pre_rerank_k", "zero", "none"]


def merge_results(dense: list[Document], sparse: list[Document]) -> list[RetrievalResult]:
    """Merge two ranked lists by content identity.

    Dense documents are visited first, then sparse. The first-seen record for
    each identity is kept and the rank from the other list merged into it.
    Ranks are 0-based list positions; a duplicate within one list keeps its
    first (best) rank.
    """
    merged: dict[str, RetrievalResult] = {}

    for rank, doc in enumerate(dense):
        key = content_identity(doc.text)
        if key not in merged:
            merged[key] = RetrievalResult(document=doc, dense_rank=rank)

    for rank, doc in enumerate(sparse):
        key = content_identity(doc.text)
        existing = merged.get(key)
        if existing is None:
            merged[key] = RetrievalResult(document=doc, sparse_rank=rank)
        elif existing.sparse_rank is None:
            existing.sparse_rank = rank

    return list(merged.values())


class HybridRetriever:
    """Runs dense and sparse retrieval concurrently and fuses them with RRF.

    Never raises: a failing or slow branch contributes no documents, and any
    other failure yields an empty result list.
    """

    def __init__(
        self,
        dense: DenseRetrieverPort,
        sparse: SparseRetrieverPort,
        reranker: RRFusionReranker,
        branch_timeout_s: float | None = 15.0,
        absent_rank_mode: AbsentRankMode = "pre_rerank_k",
    ) -> None:
        """Initialize the retriever.

        Args:
            dense: Semantic retriever.
            sparse: Lexical retriever (any strategy).
            reranker: RRF reranker.
            branch_timeout_s: Upper bound for each branch; None disables it.
            absent_rank_mode: Rank assumed for a branch a document is missing
                from: ``pre_rerank_k`` (just past the candidate pool),
                ``zero`` (treated as top-ranked) or ``none`` (no contribution).
        """
        self.dense = dense
        self.sparse = sparse
        self.reranker = reranker
        self.branch_timeout_s = branch_timeout_s
        self.absent_rank_mode = absent_rank_mode

    def absent_rank(self, pre_rerank_k: int) -> int | None:
        if self.absent_rank_mode == "zero":
            return 0
        if self.absent_rank_mode == "none":
            return None
        return pre_rerank_k

    async def _run_branch(
        self,
        name: str,
        retrieve: Callable[[str, int], Awaitable[list[Document]]],
        query: str,
        k: int,
    ) -> list[Document]:
        try:
            if self.branch_timeout_s is None:
                return await retrieve(query, k)
            return await asyncio.wait_for(retrieve(query, k), timeout=self.branch_timeout_s)
        except TimeoutError:
            logger.error("%s retrieval timed out after %ss", name, self.branch_timeout_s)
        except Exception:
            logger.exception("%s retrieval failed", name)
        return []

    async def retrieve(self, query: str, k: int = 10, pre_rerank_k: int = 10) -> list[RetrievalResult]:
        """Retrieve up to ``k`` documents for ``query``.

        Args:
            query: The user's query.
            k: Final number of results.
            pre_rerank_k: Candidates requested from each branch.

        Returns:
            Fused results, best first. Empty when nothing is found or on failure.
        """
        logger.info("Hybrid retriever received query: %r", query)
        try:
            dense_docs, sparse_docs = await asyncio.gather(
                self._run_branch("Dense", self.dense.retrieve, query, pre_rerank_k),
                self._run_branch("Sparse", self.sparse.retrieve, query, pre_rerank_k),
            )

            merged = merge_results(dense_docs, sparse_docs)
            logger.info(
                "Found %d unique documents after merging %d dense and %d sparse results",
                len(merged),
                len(dense_docs),
                len(sparse_docs),
            )

            return self.reranker.rerank(
                query, merged, k, absent_rank=self.absent_rank(pre_rerank_k)
            )
        except Exception:
            logger.exception("Hybrid retrieval failed")
            return []

"""Reciprocal Rank Fusion reranking.

RRF scores each document by summing ``1 / (K + rank)`` over the ranked
lists it appears in. It works purely on positions, so lists scored on
incompatible scales (cosine similarity, BM25, store order) fuse cleanly.
"""

import logging
from collections.abc import Sequence
from dataclasses import replace

from ..domain import Document, RetrievalResult
from ..domain.utils import content_identity

logger = logging.getLogger(__name__)

# Standard RRF smoothing constant
RRF_K = 60


def rrf_score(ranks: Sequence[int | None], k_constant: int = RRF_K) -> float:
    """Sum of ``1 / (k_constant + rank)`` over the present ranks."""
    return sum(1.0 / (k_constant + rank) for rank in ranks if rank is not None)


class RRFusionReranker:
    """Reranks merged dense/sparse results by Reciprocal Rank Fusion.

    The query is accepted for interface compatibility with relevance
    rerankers but is not used: fusion operates on precomputed ranks only.
    """

    def __init__(self, k_constant: int = RRF_K) -> None:
        """Initialize the reranker.

        Args:
            k_constant: RRF smoothing constant ``K``; must be positive.
        """
        if k_constant <= 0:
            raise ValueError("k_constant must be positive")
        self.k_constant = k_constant

    def rerank(
        self,
        query: str,
        results: list[RetrievalResult],
        k: int,
        absent_rank: int | None = None,
    ) -> list[RetrievalResult]:
        """Score, sort and truncate merged results.

        Args:
            query: The original query (unused by RRF).
            results: Merged results carrying ``dense_rank``/``sparse_rank``.
            k: Maximum number of results to return.
            absent_rank: Rank substituted for a branch the document is missing
                from. ``None`` means the missing branch contributes nothing.

        Returns:
            New RetrievalResult objects with ``fused_score`` set, sorted by
            fused score descending. Equal scores keep their input order.
        """
        if not results or k <= 0:
            return []

        scored = []
        for result in results:
            ranks = [
                result.dense_rank if result.dense_rank is not None else absent_rank,
                result.sparse_rank if result.sparse_rank is not None else absent_rank,
            ]
            scored.append(replace(result, fused_score=rrf_score(ranks, self.k_constant)))

        # sorted() is stable, including with reverse=True
        reranked = sorted(scored, key=lambda r: r.fused_score or 0.0, reverse=True)

        logger.debug(
            "RRF reranked %d results, returning %d (top score %.5f)",
            len(results),
            min(k, len(reranked)),
            reranked[0].fused_score or 0.0,
        )
        return reranked[:k]


def fuse_ranked_lists(
    lists: Sequence[Sequence[Document]],
    k: int,
    k_constant: int = RRF_K,
) -> list[tuple[Document, float]]:
    """RRF over any number of ranked Document lists.

    Documents are keyed by content identity; the first-seen record is kept.
    A document missing from a list gets no contribution from it.

    Args:
        lists: Ranked lists, best first.
        k: Maximum number of documents to return.
        k_constant: RRF smoothing constant.

    Returns:
        ``(document, fused_score)`` pairs, score descending, stable for ties.
    """
    documents: dict[str, Document] = {}
    scores: dict[str, float] = {}
    for ranked in lists:
        seen_in_list: set[str] = set()
        for rank, doc in enumerate(ranked):
            key = content_identity(doc.text)
            if key in seen_in_list:
                continue
            seen_in_list.add(key)
            documents.setdefault(key, doc)
            scores[key] = scores.get(key, 0.0) + 1.0 / (k_constant + rank)

    fused = sorted(documents, key=lambda key: scores[key], reverse=True)
    return [(documents[key], scores[key]) for key in fused[: max(k, 0)]]

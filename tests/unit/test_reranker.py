"""Unit tests for RRF fusion reranking."""

import pytest

from sitesearch.core.domain import RetrievalResult
from sitesearch.core.services.reranker import RRF_K, RRFusionReranker, fuse_ranked_lists, rrf_score

pytestmark = pytest.mark.unit


def _result(make_doc, text, dense=None, sparse=None):
    return RetrievalResult(document=make_doc(text), dense_rank=dense, sparse_rank=sparse)


class TestRRFScore:
    """Tests for the rrf_score helper."""

    def test_score_sums_reciprocal_ranks(self):
        """Both ranks contribute 1/(K + rank)."""
        assert rrf_score([0, 0]) == pytest.approx(1 / 60 + 1 / 60)
        assert rrf_score([2, 4]) == pytest.approx(1 / 62 + 1 / 64)

    def test_missing_rank_contributes_nothing(self):
        """None ranks are skipped."""
        assert rrf_score([3, None]) == pytest.approx(1 / 63)
        assert rrf_score([None, None]) == 0.0

    def test_default_constant(self):
        """The standard smoothing constant is 60."""
        assert RRF_K == 60


class TestRRFusionReranker:
    """Tests for RRFusionReranker.rerank."""

    def test_top_ranks_beat_lower_ranks(self, make_doc):
        """(0, 0) scores strictly higher than (2, 4) and (5, 5)."""
        results = [
            _result(make_doc, "lower", dense=5, sparse=5),
            _result(make_doc, "middle", dense=2, sparse=4),
            _result(make_doc, "top", dense=0, sparse=0),
        ]

        reranked = RRFusionReranker().rerank("ignored", results, k=3)

        assert [r.document.text for r in reranked] == ["top", "middle", "lower"]
        assert reranked[0].fused_score == pytest.approx(0.033333, rel=1e-4)
        assert reranked[1].fused_score == pytest.approx(0.03226, rel=1e-3)
        assert reranked[0].fused_score > reranked[1].fused_score > reranked[2].fused_score

    def test_truncates_to_k_sorted_descending(self, make_doc):
        """Output length is min(k, n) and scores are non-increasing."""
        results = [_result(make_doc, f"doc {i}", dense=i, sparse=20 - i) for i in range(20)]
        reranker = RRFusionReranker()

        top5 = reranker.rerank("q", results, k=5)
        everything = reranker.rerank("q", results, k=50)

        assert len(top5) == 5
        assert len(everything) == 20
        scores = [r.fused_score for r in everything]
        assert scores == sorted(scores, reverse=True)

    def test_ties_keep_input_order(self, make_doc):
        """Equal fused scores preserve the input order."""
        results = [
            _result(make_doc, "first", dense=1, sparse=3),
            _result(make_doc, "second", dense=3, sparse=1),
        ]

        reranked = RRFusionReranker().rerank("q", results, k=2)

        assert [r.document.text for r in reranked] == ["first", "second"]

    def test_absent_rank_substitution(self, make_doc):
        """A missing branch uses absent_rank, or contributes nothing when None."""
        results = [_result(make_doc, "dense only", dense=0)]
        reranker = RRFusionReranker()

        with_sentinel = reranker.rerank("q", results, k=1, absent_rank=10)
        without = reranker.rerank("q", results, k=1, absent_rank=None)
        zero = reranker.rerank("q", results, k=1, absent_rank=0)

        assert with_sentinel[0].fused_score == pytest.approx(1 / 60 + 1 / 70)
        assert without[0].fused_score == pytest.approx(1 / 60)
        assert zero[0].fused_score == pytest.approx(2 / 60)

    def test_document_in_both_branches_outranks_single_branch(self, make_doc):
        """Presence in both lists beats the best single-list position."""
        results = [
            _result(make_doc, "dense only", dense=0),
            _result(make_doc, "both", dense=3, sparse=3),
        ]

        reranked = RRFusionReranker().rerank("q", results, k=2, absent_rank=10)

        assert reranked[0].document.text == "both"

    def test_does_not_mutate_input(self, make_doc):
        """Input results are left without a fused score."""
        results = [_result(make_doc, "a", dense=0, sparse=1)]

        RRFusionReranker().rerank("q", results, k=1)

        assert results[0].fused_score is None

    def test_empty_and_zero_k(self, make_doc):
        """No input or k <= 0 returns an empty list."""
        reranker = RRFusionReranker()
        assert reranker.rerank("q", [], k=3) == []
        assert reranker.rerank("q", [_result(make_doc, "a", dense=0)], k=0) == []

    def test_custom_constant(self, make_doc):
        """The smoothing constant is configurable."""
        results = [_result(make_doc, "a", dense=0, sparse=0)]
        reranked = RRFusionReranker(k_constant=1).rerank("q", results, k=1)
        assert reranked[0].fused_score == pytest.approx(2.0)

    def test_invalid_constant_rejected(self):
        """Non-positive constants raise ValueError."""
        with pytest.raises(ValueError):
            RRFusionReranker(k_constant=0)


class TestFuseRankedLists:
    """Tests for RRF over any number of lists."""

    def test_documents_in_several_lists_rise(self, make_doc):
        """A document found by every list ranks first."""
        shared = make_doc("shared")
        lists = [
            [make_doc("a"), shared],
            [make_doc("b"), shared],
            [shared, make_doc("c")],
        ]

        fused = fuse_ranked_lists(lists, k=10)

        assert fused[0][0] is shared
        assert fused[0][1] == pytest.approx(2 / 61 + 1 / 60)
        assert len(fused) == 4

    def test_identity_is_content_based(self, make_doc):
        """Different ids with the same text are one document; first seen wins."""
        first = make_doc("same text")
        second = make_doc("same text")

        fused = fuse_ranked_lists([[first], [second]], k=5)

        assert len(fused) == 1
        assert fused[0][0] is first

    def test_truncation(self, make_doc):
        """At most k documents are returned."""
        lists = [[make_doc(f"doc {i}") for i in range(10)]]
        assert len(fuse_ranked_lists(lists, k=3)) == 3
        assert fuse_ranked_lists(lists, k=0) == []

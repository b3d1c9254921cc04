"""BM25 index: text analysis, persistence and scoring.

The index file is JSON holding each document's payload and its analyzed
tokens (title and text together, weighted equally). Queries must be analyzed
with the same pipeline, so the pipeline version is stored with the index and
checked on load.
"""

import asyncio
import json
import logging
import re
from pathlib import Path
from typing import Any

from rank_bm25 import BM25Plus

from ..domain import Document
from ..domain.exceptions import IndexNotFoundError, RetrievalError
from ..ports.document_store_port import DocumentStorePort

logger = logging.getLogger(__name__)

PIPELINE_VERSION = 1

_TOKEN_RE = re.compile(r"[\w']+")

# Negations are kept: they drive negation propagation
NEGATIONS = frozenset(
    {"no", "not", "never", "nor", "none", "nothing", "nobody", "nowhere", "cannot", "without"}
)
NEGATION_SCOPE = 2

STOPWORDS = frozenset(
    {
        "a", "about", "above", "after", "again", "against", "all", "am", "an", "and",
        "any", "are", "as", "at", "be", "because", "been", "before", "being", "below",
        "between", "both", "but", "by", "can", "could", "did", "do", "does", "doing",
        "down", "during", "each", "few", "for", "from", "further", "had", "has", "have",
        "having", "he", "her", "here", "hers", "herself", "him", "himself", "his", "how",
        "i", "if", "in", "into", "is", "it", "its", "itself", "just", "me", "more",
        "most", "my", "myself", "of", "off", "on", "once", "only", "or", "other", "our",
        "ours", "ourselves", "out", "over", "own", "same", "she", "should", "so", "some",
        "such", "than", "that", "the", "their", "theirs", "them", "themselves", "then",
        "there", "these", "they", "this", "those", "through", "to", "too", "under",
        "until", "up", "very", "was", "we", "were", "what", "when", "where", "which",
        "while", "who", "whom", "why", "will", "with", "would", "you", "your", "yours",
        "yourself", "yourselves",
    }
)  # fmt: skip

# Longest suffix first; (suffix, replacement)
_SUFFIX_RULES = (
    ("ational", "ate"),
    ("ization", "ize"),
    ("fulness", "ful"),
    ("iveness", "ive"),
    ("ousness", "ous"),
    ("ements", ""),
    ("ations", "ate"),
    ("ement", ""),
    ("ation", "ate"),
    ("ness", ""),
    ("ment", ""),
    ("ings", ""),
    ("sses", "ss"),
    ("edly", ""),
    ("ies", "y"),
    ("ing", ""),
    ("ed", ""),
    ("ly", ""),
    ("s", ""),
)
_MIN_STEM = 3
_VOWELS = "aeiou"


def stem(token: str) -> str:
    """Light suffix-stripping stemmer.

    Strips the first matching suffix when at least three characters remain,
    then undoes a doubled final consonant ("runn" -> "run") and maps a final
    consonant + y to i so "policy" and "policies" share a stem. Tokens ending
    in ``ss`` and non-alphabetic tokens are left alone.
    """
    if not token.isalpha() or token.endswith("ss"):
        return token
    for suffix, replacement in _SUFFIX_RULES:
        if token.endswith(suffix) and len(token) - len(suffix) >= _MIN_STEM:
            token = token[: -len(suffix)] + replacement
            break
    if len(token) > _MIN_STEM and token[-1] == token[-2] and token[-1] not in _VOWELS + "lsz":
        token = token[:-1]
    if len(token) > _MIN_STEM and token[-1] == "y" and token[-2] not in _VOWELS:
        token = token[:-1] + "i"
    return token


def analyze(text: str) -> list[str]:
    """Lowercase, tokenize, drop stopwords, stem and propagate negations.

    A negation word marks the next ``NEGATION_SCOPE`` tokens with a ``!``
    prefix so "not cheap" and "cheap" do not match each other.
    """
    tokens = _TOKEN_RE.findall(text.lower())
    analyzed: list[str] = []
    negate_remaining = 0
    for token in tokens:
        token = token.strip("'")
        if not token:
            continue
        if token in NEGATIONS or token.endswith("n't"):
            negate_remaining = NEGATION_SCOPE
            continue
        if token in STOPWORDS:
            continue
        token = stem(token)
        if negate_remaining:
            token = f"!{token}"
            negate_remaining -= 1
        analyzed.append(token)
    return analyzed


def _document_tokens(doc: Document) -> list[str]:
    return analyze(doc.title or "") + analyze(doc.text)


class BM25Index:
    """In-memory BM25+ index over a fixed set of documents.

    BM25+ keeps every term's IDF positive, so terms found in half the corpus
    or more still count and a single-document index can match.
    """

    def __init__(self, documents: list[Document], tokens: list[list[str]] | None = None) -> None:
        self.documents = documents
        self.tokens = tokens if tokens is not None else [_document_tokens(d) for d in documents]
        if len(self.tokens) != len(self.documents):
            raise RetrievalError(
                "BM25 index is inconsistent",
                context={"documents": len(self.documents), "token_lists": len(self.tokens)},
            )
        self._token_sets = [set(tokens) for tokens in self.tokens]
        # BM25Plus divides by the average document length
        self._bm25 = BM25Plus(self.tokens) if any(self.tokens) else None

    def __len__(self) -> int:
        return len(self.documents)

    def search(self, query: str, k: int) -> list[tuple[Document, float]]:
        """Top ``k`` documents sharing a query term, score descending."""
        query_tokens = analyze(query)
        if self._bm25 is None or not query_tokens or k <= 0:
            return []

        terms = set(query_tokens)
        matching = [i for i, doc_terms in enumerate(self._token_sets) if doc_terms & terms]
        if not matching:
            return []

        scores = self._bm25.get_scores(query_tokens)
        ranked = sorted(matching, key=lambda i: scores[i], reverse=True)
        return [(self.documents[i], float(scores[i])) for i in ranked[:k]]

    def to_json(self) -> dict[str, Any]:
        return {
            "pipeline_version": PIPELINE_VERSION,
            "documents": [doc.to_payload() for doc in self.documents],
            "tokens": self.tokens,
        }

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> "BM25Index":
        if data.get("pipeline_version") != PIPELINE_VERSION:
            raise RetrievalError(
                "BM25 index was built with a different text pipeline; rebuild it",
                context={"found": data.get("pipeline_version"), "expected": PIPELINE_VERSION},
            )
        documents = [Document.from_payload(payload) for payload in data.get("documents", [])]
        return cls(documents, data.get("tokens"))

    def save(self, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(self.to_json(), ensure_ascii=False), encoding="utf-8")

    @classmethod
    def load(cls, path: Path) -> "BM25Index":
        """Load an index file.

        Raises:
            IndexNotFoundError: If the file does not exist.
            RetrievalError: If the file is not a valid index.
        """
        if not path.exists():
            raise IndexNotFoundError(
                f"BM25 index not found at {path}",
                context={"path": str(path)},
            )
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise RetrievalError(
                f"BM25 index at {path} is unreadable",
                cause=e,
                context={"path": str(path)},
            ) from e
        index = cls.from_json(data)
        logger.info("Loaded BM25 index with %d documents from %s", len(index), path)
        return index


async def rebuild_bm25_index(store: DocumentStorePort, tenant_id: str, path: Path) -> int:
    """Export the tenant's documents from the store into a BM25 index file.

    Returns:
        Number of documents indexed.
    """
    documents = await store.scroll_documents(tenant_id)
    index = await asyncio.to_thread(BM25Index, documents)
    await asyncio.to_thread(index.save, path)
    logger.info("Wrote BM25 index with %d documents to %s", len(index), path)
    return len(index)

"""Text helpers shared by ingestion and retrieval.

Text handling contract
----------------------
* Page text is cleaned once at extraction time: BOM markers removed and
  whitespace collapsed, so chunk text stored in the document store is
  already canonical.
* Content identity is computed over the stored text verbatim. Two chunks
  with identical text are the same entity regardless of id or URL.
"""

import hashlib
import re
import unicodedata

_BOM_CHARS = ("\ufeff", "\ufffd")
_SENTENCE_ENDINGS = (". ", ".\n", "? ", "?\n", "! ", "!\n")
_WHITESPACE_RE = re.compile(r"\s+")
_INLINE_SPACE_RE = re.compile(r"[ \t\f\v]+")
_BLANK_LINES_RE = re.compile(r"\n{3,}")


def normalize_text(text: str) -> str:
    """Strip BOM markers, apply NFC and tidy whitespace while keeping paragraphs.

    Runs of spaces collapse to one, ``\\r\\n`` becomes ``\\n`` and more than
    one blank line collapses to a single blank line.
    """
    if not text:
        return ""

    cleaned = text
    for char in _BOM_CHARS:
        cleaned = cleaned.replace(char, "")
    cleaned = unicodedata.normalize("NFC", cleaned)
    cleaned = cleaned.replace("\r\n", "\n").replace("\r", "\n")
    cleaned = _INLINE_SPACE_RE.sub(" ", cleaned)
    cleaned = "\n".join(line.strip() for line in cleaned.split("\n"))
    cleaned = _BLANK_LINES_RE.sub("\n\n", cleaned)
    return cleaned.strip()


def collapse_whitespace(text: str) -> str:
    """Collapse every whitespace run (newlines included) to a single space."""
    if not text:
        return ""
    for char in _BOM_CHARS:
        text = text.replace(char, "")
    return _WHITESPACE_RE.sub(" ", text).strip()


def content_identity(text: str) -> str:
    """SHA-256 hex digest of ``text``; the dedup key across retrieval branches."""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def chunk_text(
    text: str,
    max_length: int = 2000,
    min_length: int = 1000,
    overlap: int = 0,
) -> list[str]:
    """Split text into sentence-bounded chunks for embedding.

    Every chunk except the last is between ``min_length`` and ``max_length``
    characters. A chunk ends at the last sentence boundary inside that
    window, falling back to the last word boundary, then to a hard cut at
    ``max_length``.

    Args:
        text: Text to chunk.
        max_length: Maximum chunk size in characters (must be positive).
        min_length: Minimum size of every chunk but the last.
        overlap: Characters repeated at the start of the next chunk
            (must be less than max_length).

    Returns:
        List of text chunks.

    Raises:
        ValueError: If the length parameters are inconsistent.
    """
    if max_length <= 0:
        raise ValueError("max_length must be positive")
    if min_length < 0:
        raise ValueError("min_length must be non-negative")
    if min_length > max_length:
        raise ValueError("min_length must not exceed max_length")
    if overlap < 0:
        raise ValueError("overlap must be non-negative")
    if overlap >= max_length:
        raise ValueError("overlap must be less than max_length to avoid infinite loop")

    text = text.strip() if text else ""
    if not text:
        return []

    if len(text) <= max_length:
        return [text]

    chunks = []
    length = len(text)
    start = 0
    while start < length:
        while start < length and text[start].isspace():
            start += 1
        if start >= length:
            break

        if length - start <= max_length:
            chunks.append(text[start:])
            break

        end = _find_break(text, start + max(min_length, 1), start + max_length)
        chunks.append(text[start:end])
        start = max(end - overlap, start + 1)
    return chunks


def _find_break(text: str, floor: int, limit: int) -> int:
    """Exclusive end index for a chunk that must end within [floor, limit]."""
    # Sentence boundary: keep the punctuation, drop the whitespace after it
    best = max(text.rfind(punct, floor - 1, limit + 1) for punct in _SENTENCE_ENDINGS)
    if best >= floor - 1:
        return best + 1

    for index in range(limit, floor - 1, -1):
        if text[index].isspace() and not text[index - 1].isspace():
            return index

    return limit

"""Keyword Extractor Port Interface."""

from abc import ABC, abstractmethod


class KeywordExtractorPort(ABC):
    """Extracts search keywords from a natural-language query."""

    @abstractmethod
    async def extract_keywords(self, query: str) -> list[str]:
        """Keywords in order of importance. May be empty."""
        ...

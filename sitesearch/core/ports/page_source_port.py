"""Page Source Port Interfaces."""

from abc import ABC, abstractmethod

from ..domain import PageContent, SitemapEntry


class PageFetcherPort(ABC):
    """Fetches raw page markup."""

    @abstractmethod
    async def fetch(self, url: str) -> str: ...

    async def close(self) -> None:  # noqa: B027
        """Release network resources. Default is a no-op."""


class SitemapLoaderPort(ABC):
    """Reads the list of pages to ingest."""

    @abstractmethod
    async def load(self, location: str) -> list[SitemapEntry]: ...


class ContentExtractorPort(ABC):
    """Turns page markup into a title and content blocks."""

    @abstractmethod
    def extract(self, html: str, url: str = "") -> PageContent: ...

"""Models for the sitemap ingestion pipeline."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class SitemapEntry:
    """One ``<url>`` element of a sitemap."""

    loc: str
    lastmod: str | None = None


@dataclass
class PageContent:
    """Title and content blocks extracted from a page's markup.

    Attributes:
        title: Page title (og:title, first h1, or <title>), if any.
        blocks: Whitespace-collapsed text of each non-empty content block.
        description: og:description or description meta content, if any.
    """

    title: str | None
    blocks: list[str] = field(default_factory=list)
    description: str | None = None


@dataclass
class IngestionReport:
    """Counters describing one ingestion run."""

    source: str
    lang: str
    pages_total: int = 0
    pages_ingested: int = 0
    pages_empty: int = 0
    pages_failed: int = 0
    documents_upserted: int = 0
    failed_urls: list[str] = field(default_factory=list)

    def record_failure(self, url: str) -> None:
        self.pages_failed += 1
        self.failed_urls.append(url)

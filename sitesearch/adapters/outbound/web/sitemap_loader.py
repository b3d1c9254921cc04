"""Sitemap loading and parsing."""

import asyncio
import logging
from pathlib import Path
from urllib.parse import unquote, urlparse

from bs4 import BeautifulSoup

from ....common.retry import RetryPolicy, with_retry
from ....core.domain import SitemapEntry
from ....core.domain.exceptions import SitemapError
from ....core.ports.page_source_port import PageFetcherPort, SitemapLoaderPort

logger = logging.getLogger(__name__)


def parse_sitemap(xml: str) -> list[SitemapEntry]:
    """Parse ``<urlset>`` XML into entries, in document order.

    Raises:
        SitemapError: If the document is not a ``urlset`` sitemap.
    """
    soup = BeautifulSoup(xml, "xml")
    urlset = soup.find("urlset")
    if urlset is None:
        raise SitemapError("Document is not a sitemap urlset", context={"root": _root_name(soup)})

    entries = []
    for url in urlset.find_all("url"):
        loc = url.find("loc")
        if loc is None or not loc.get_text(strip=True):
            continue
        lastmod = url.find("lastmod")
        entries.append(
            SitemapEntry(
                loc=loc.get_text(strip=True),
                lastmod=lastmod.get_text(strip=True) if lastmod else None,
            )
        )
    return entries


def _root_name(soup: BeautifulSoup) -> str | None:
    root = next(iter(soup.find_all(recursive=False)), None)
    return root.name if root else None


class SitemapLoader(SitemapLoaderPort):
    """Loads a sitemap from a local path, a ``file://`` URL or over HTTP."""

    def __init__(self, fetcher: PageFetcherPort, retry_policy: RetryPolicy | None = None) -> None:
        self._fetcher = fetcher
        self._retry_policy = retry_policy or RetryPolicy()

    async def load(self, location: str) -> list[SitemapEntry]:
        """Read and parse the sitemap at ``location``.

        Args:
            location: Filesystem path, ``file://`` URL or ``http(s)://`` URL.

        Returns:
            Sitemap entries in document order.

        Raises:
            SitemapError: If the sitemap cannot be read or parsed.
        """
        parsed = urlparse(location)
        try:
            if parsed.scheme in ("http", "https"):
                xml = await with_retry(
                    lambda: self._fetcher.fetch(location),
                    self._retry_policy,
                    description=f"sitemap fetch {location}",
                )
            else:
                path = Path(unquote(parsed.path)) if parsed.scheme == "file" else Path(location)
                xml = await asyncio.to_thread(path.read_text, encoding="utf-8")
        except SitemapError:
            raise
        except Exception as e:
            raise SitemapError(
                f"Failed to load sitemap from {location}",
                cause=e,
                context={"location": location},
            ) from e

        entries = parse_sitemap(xml)
        logger.info("Loaded %d sitemap entries from %s", len(entries), location)
        return entries

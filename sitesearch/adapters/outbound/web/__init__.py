"""Web adapters: page fetching, sitemap loading and HTML extraction."""

from .html_extractor import HtmlContentExtractor
from .page_fetcher import HttpPageFetcher
from .sitemap_loader import SitemapLoader, parse_sitemap

__all__ = ["HtmlContentExtractor", "HttpPageFetcher", "SitemapLoader", "parse_sitemap"]

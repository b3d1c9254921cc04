"""Title and content-block extraction from page HTML."""

from bs4 import BeautifulSoup

from ....core.domain import PageContent
from ....core.domain.exceptions import ContentExtractionError
from ....core.domain.utils import collapse_whitespace
from ....core.ports.page_source_port import ContentExtractorPort

DEFAULT_CONTENT_SELECTOR = ".DCContentBlock"


class HtmlContentExtractor(ContentExtractorPort):
    """Extracts the page title, description and the text of each content block.

    Content blocks are the elements matching a CSS selector. Each block's
    text is whitespace-collapsed; empty blocks are dropped. The description
    comes from og:description, then the description meta tag.
    """

    def __init__(self, content_selector: str = DEFAULT_CONTENT_SELECTOR) -> None:
        self.content_selector = content_selector

    def extract(self, html: str, url: str = "") -> PageContent:
        try:
            soup = BeautifulSoup(html, "lxml")
            blocks = []
            for element in soup.select(self.content_selector):
                text = collapse_whitespace(element.get_text(" "))
                if text:
                    blocks.append(text)
        except Exception as e:
            raise ContentExtractionError(
                "Failed to parse page markup",
                cause=e,
                context={"url": url, "selector": self.content_selector},
            ) from e

        description = self._meta_content(soup, "og:description") or self._meta_content(
            soup, "description", attr="name"
        )
        return PageContent(title=self._extract_title(soup), blocks=blocks, description=description)

    @staticmethod
    def _meta_content(soup: BeautifulSoup, key: str, attr: str = "property") -> str | None:
        tag = soup.find("meta", attrs={attr: key})
        if tag:
            content = collapse_whitespace(str(tag.get("content") or ""))
            if content:
                return content
        return None

    @classmethod
    def _extract_title(cls, soup: BeautifulSoup) -> str | None:
        """og:title, then the first h1, then <title>."""
        og_title = cls._meta_content(soup, "og:title")
        if og_title:
            return og_title

        for tag_name in ("h1", "title"):
            tag = soup.find(tag_name)
            if tag:
                text = collapse_whitespace(tag.get_text(" "))
                if text:
                    return text
        return None

"""Async HTTP page fetcher."""

import logging

import httpx

from ....core.domain.exceptions import PageFetchError
from ....core.ports.page_source_port import PageFetcherPort

logger = logging.getLogger(__name__)

# Constants
REQUEST_TIMEOUT = 30.0
USER_AGENT = "Mozilla/5.0 (compatible; sitesearch-ingest/1.0)"


class HttpPageFetcher(PageFetcherPort):
    """Fetches page markup over HTTP with a shared ``httpx.AsyncClient``.

    Any non-2xx status or transport error raises ``PageFetchError``, which is
    retryable: the ingestion pipeline backs off and tries again.
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        timeout_s: float = REQUEST_TIMEOUT,
        user_agent: str = USER_AGENT,
    ) -> None:
        """Initialize the fetcher.

        Args:
            client: Client to reuse. When omitted one is created and owned.
            timeout_s: Per-request timeout in seconds.
            user_agent: User-Agent header sent with every request.
        """
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=timeout_s,
            follow_redirects=True,
            headers={"User-Agent": user_agent},
        )

    async def close(self) -> None:
        """Close the HTTP client if this fetcher created it."""
        if self._owns_client:
            await self._client.aclose()

    async def fetch(self, url: str) -> str:
        """GET ``url`` and return the response body as text.

        Raises:
            PageFetchError: On transport errors, timeouts and non-2xx responses.
        """
        try:
            response = await self._client.get(url)
        except httpx.HTTPError as e:
            raise PageFetchError(
                f"Request to {url} failed: {type(e).__name__}",
                cause=e,
                context={"url": url},
            ) from e

        if not response.is_success:
            raise PageFetchError(
                f"Request failed with status {response.status_code}",
                context={"url": url, "status": response.status_code},
            )

        logger.debug("Fetched %s (%d bytes)", url, len(response.content))
        return response.text

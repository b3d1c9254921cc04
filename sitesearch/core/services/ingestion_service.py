"""Sitemap ingestion: fetch, extract, chunk, embed and upsert pages.

Pages are processed in batches. Batches run strictly in sequence with a
pause between them; pages inside a batch run concurrently, with their first
fetches spaced out and a cap on how many run at once. Each page is retried
as a unit on transient failures and skipped if it keeps failing.
"""

import asyncio
import logging
import uuid
from collections.abc import Awaitable, Callable, Iterable

from ...common.exception_handler import log_exception
from ...common.retry import RetryPolicy, with_retry
from ..domain import Document, IngestionReport, SitemapEntry
from ..domain.utils import chunk_text
from ..ports.document_store_port import DocumentStorePort
from ..ports.embedding_port import EmbeddingPort
from ..ports.page_source_port import ContentExtractorPort, PageFetcherPort, SitemapLoaderPort

logger = logging.getLogger(__name__)

EntryFilter = Callable[[SitemapEntry, str], bool]

DEFAULT_EXCLUDED_SEGMENTS = ("/ar/", "/en/")


def exclude_path_segments(segments: Iterable[str] = DEFAULT_EXCLUDED_SEGMENTS) -> EntryFilter:
    """Entry filter dropping URLs that contain any of ``segments``.

    The ``lang`` argument of the returned predicate is ignored.
    """
    excluded = tuple(segments)

    def entry_filter(entry: SitemapEntry, lang: str) -> bool:
        return not any(segment in entry.loc for segment in excluded)

    return entry_filter


class IngestionService:
    """Populates the document store from a sitemap."""

    def __init__(
        self,
        sitemap_loader: SitemapLoaderPort,
        fetcher: PageFetcherPort,
        extractor: ContentExtractorPort,
        embedder: EmbeddingPort,
        store: DocumentStorePort,
        tenant_id: str,
        *,
        batch_size: int = 10,
        max_concurrency: int = 5,
        item_delay_s: float = 0.2,
        batch_delay_s: float = 1.0,
        retry_policy: RetryPolicy | None = None,
        chunk_max_length: int = 2000,
        chunk_min_length: int = 1000,
        chunk_overlap: int = 0,
        entry_filter: EntryFilter | None = None,
        index_page_summary: bool = False,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """Initialize the service.

        Args:
            sitemap_loader: Reads and parses the sitemap.
            fetcher: Fetches page markup.
            extractor: Extracts title and content blocks from markup.
            embedder: Embeds chunk text.
            store: Destination document store.
            tenant_id: Tenant every ingested document belongs to.
            batch_size: Pages per batch.
            max_concurrency: Pages processed at once within a batch.
            item_delay_s: Spacing between fetch starts within a batch.
            batch_delay_s: Pause between batches.
            retry_policy: Backoff for transient page failures.
            chunk_max_length: Maximum chunk size in characters.
            chunk_min_length: Minimum size of every chunk but a block's last.
            chunk_overlap: Characters shared by consecutive chunks.
            entry_filter: Predicate selecting sitemap entries to ingest.
            index_page_summary: Also index the title and description of pages
                that have content, each as a chunk of its own.
            sleep: Awaitable sleep, injectable for tests.
        """
        if batch_size <= 0 or max_concurrency <= 0:
            raise ValueError("batch_size and max_concurrency must be positive")
        self.sitemap_loader = sitemap_loader
        self.fetcher = fetcher
        self.extractor = extractor
        self.embedder = embedder
        self.store = store
        self.tenant_id = tenant_id
        self.batch_size = batch_size
        self.max_concurrency = max_concurrency
        self.item_delay_s = item_delay_s
        self.batch_delay_s = batch_delay_s
        self.retry_policy = retry_policy or RetryPolicy()
        self.chunk_max_length = chunk_max_length
        self.chunk_min_length = chunk_min_length
        self.chunk_overlap = chunk_overlap
        self.entry_filter = entry_filter or exclude_path_segments()
        self.index_page_summary = index_page_summary
        self._sleep = sleep

    async def ingest(self, source_url: str, lang: str) -> IngestionReport:
        """Ingest every selected page of the sitemap at ``source_url``.

        Args:
            source_url: Sitemap location (path, file:// or http(s) URL).
            lang: Language code, passed to the entry filter.

        Returns:
            Counters for the run.

        Raises:
            SitemapError: If the sitemap cannot be loaded or parsed.
        """
        entries = await self.sitemap_loader.load(source_url)
        selected = [entry for entry in entries if self.entry_filter(entry, lang)]
        logger.info(
            "Ingesting %d of %d sitemap entries from %s (lang=%s)",
            len(selected),
            len(entries),
            source_url,
            lang,
            extra={"url": source_url, "lang": lang, "tenant_id": self.tenant_id},
        )

        report = IngestionReport(source=source_url, lang=lang, pages_total=len(selected))
        batches = [
            selected[i : i + self.batch_size] for i in range(0, len(selected), self.batch_size)
        ]
        for number, batch in enumerate(batches, start=1):
            logger.info(
                "Processing batch %d of %d", number, len(batches), extra={"batch": number}
            )
            await self._process_batch(batch, report)
            if number < len(batches):
                logger.debug("Waiting %.1fs before next batch", self.batch_delay_s)
                await self._sleep(self.batch_delay_s)

        logger.info(
            "Ingestion finished: %d pages ingested, %d empty, %d failed, %d documents upserted",
            report.pages_ingested,
            report.pages_empty,
            report.pages_failed,
            report.documents_upserted,
        )
        return report

    async def _process_batch(self, batch: list[SitemapEntry], report: IngestionReport) -> None:
        semaphore = asyncio.Semaphore(self.max_concurrency)
        await asyncio.gather(
            *(
                self._process_entry(position, entry, semaphore, report)
                for position, entry in enumerate(batch)
            )
        )

    async def _process_entry(
        self,
        position: int,
        entry: SitemapEntry,
        semaphore: asyncio.Semaphore,
        report: IngestionReport,
    ) -> None:
        if position and self.item_delay_s:
            await self._sleep(position * self.item_delay_s)

        async with semaphore:
            try:
                upserted = await with_retry(
                    lambda: self.ingest_page(entry.loc),
                    self.retry_policy,
                    description=f"Ingesting {entry.loc}",
                    sleep=self._sleep,
                )
            except Exception as e:
                # One bad page never aborts the run
                log_exception(e, log=logger, extra_context={"url": entry.loc, "skipped": True})
                report.record_failure(entry.loc)
                return

        if upserted:
            report.pages_ingested += 1
            report.documents_upserted += upserted
        else:
            report.pages_empty += 1

    def chunk_page(self, blocks: list[str]) -> list[str]:
        """Chunk every content block of a page, in block order."""
        chunks: list[str] = []
        for block in blocks:
            chunks.extend(
                chunk_text(
                    block,
                    max_length=self.chunk_max_length,
                    min_length=self.chunk_min_length,
                    overlap=self.chunk_overlap,
                )
            )
        return chunks

    async def ingest_page(self, url: str) -> int:
        """Fetch, extract, chunk, embed and upsert one page.

        Returns:
            Number of documents upserted; 0 for a page without content.
        """
        logger.debug("Processing URL: %s", url)
        html = await self.fetcher.fetch(url)
        page = self.extractor.extract(html, url)

        blocks = page.blocks
        if self.index_page_summary and blocks:
            blocks = [text for text in (page.title, page.description) if text] + blocks

        chunks = self.chunk_page(blocks)
        if not chunks:
            logger.debug("No content found for URL: %s", url)
            return 0

        embeddings = await self.embedder.embed_documents(chunks)
        documents = [
            Document(
                id=str(uuid.uuid4()),
                tenant_id=self.tenant_id,
                text=chunk,
                url=url,
                title=page.title,
                embedding=embedding,
            )
            for chunk, embedding in zip(chunks, embeddings, strict=True)
        ]

        upserted = await self.store.upsert_many(documents)
        logger.debug("Upserted %d documents for %s", upserted, url)
        return upserted

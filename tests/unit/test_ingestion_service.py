"""Unit tests for the sitemap ingestion pipeline."""

import asyncio

import pytest

from sitesearch.adapters.outbound.web.html_extractor import HtmlContentExtractor
from sitesearch.common.retry import RetryPolicy
from sitesearch.core.domain import SitemapEntry
from sitesearch.core.domain.exceptions import PageFetchError, SitemapError
from sitesearch.core.ports.page_source_port import PageFetcherPort, SitemapLoaderPort
from sitesearch.core.services.ingestion_service import IngestionService, exclude_path_segments

pytestmark = pytest.mark.unit

TENANT = "tenant-a"
BASE = "https://example.com"


def page_html(*blocks: str, title: str = "Visitor Info", description: str = "") -> str:
    body = "".join(f'<div class="DCContentBlock">{b}</div>' for b in blocks)
    meta = f'<meta property="og:description" content="{description}">' if description else ""
    return (
        f'<html><head><meta property="og:title" content="{title}">{meta}</head>'
        f"<body><h1>Ignored heading</h1>{body}</body></html>"
    )


class StaticSitemap(SitemapLoaderPort):
    def __init__(self, urls=None, error=None):
        self.entries = [SitemapEntry(loc=url) for url in urls or []]
        self.error = error

    async def load(self, location):
        if self.error:
            raise self.error
        return self.entries


class FlakyFetcher(PageFetcherPort):
    """Fails a fixed number of times per URL before serving the page."""

    def __init__(self, html, failures):
        self.html = html
        self.failures = dict(failures)
        self.calls = []

    async def fetch(self, url):
        self.calls.append(url)
        if self.failures.get(url, 0) > 0:
            self.failures[url] -= 1
            raise PageFetchError("Request failed with status 503", context={"url": url})
        return self.html


class ConcurrencyTracker(PageFetcherPort):
    """Tracks how many fetches are in flight at once."""

    def __init__(self, html):
        self.html = html
        self.active = 0
        self.max_active = 0
        self.calls = []

    async def fetch(self, url):
        self.calls.append(url)
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        await asyncio.sleep(0.01)
        self.active -= 1
        return self.html


@pytest.fixture
def build_service(embedder, store, sleep_recorder):
    def build(sitemap, fetcher, **overrides):
        options = {
            "batch_size": 10,
            "max_concurrency": 5,
            "item_delay_s": 0.2,
            "batch_delay_s": 1.0,
            "retry_policy": RetryPolicy(max_retries=3, base_delay_s=1.0, max_delay_s=30.0),
            "sleep": sleep_recorder,
        }
        options.update(overrides)
        return IngestionService(
            sitemap_loader=sitemap,
            fetcher=fetcher,
            extractor=HtmlContentExtractor(),
            embedder=embedder,
            store=store,
            tenant_id=TENANT,
            **options,
        )

    return build


class TestIngestPage:
    """Tests for single-page processing."""

    async def test_single_2500_character_block_yields_two_documents(
        self, build_service, fetcher_factory, embedder, store
    ):
        """One block of 2,500 characters with max 2000 gives 2 upserted documents."""
        block = ("Opening hours change on public holidays. " * 70)[:2500]
        url = f"{BASE}/he/visit"
        service = build_service(
            StaticSitemap([url]), fetcher_factory({url: page_html(block)})
        )

        report = await service.ingest("sitemap.xml", "he")

        assert len(store.upsert_calls) == 1
        documents = store.upsert_calls[0]
        assert len(documents) == 2
        assert {d.url for d in documents} == {url}
        assert {d.title for d in documents} == {"Visitor Info"}
        assert documents[0].id != documents[1].id
        assert all(d.tenant_id == TENANT for d in documents)
        assert all(len(d.embedding) == embedder.dimension for d in documents)
        assert all(1 <= len(d.text) <= 2000 for d in documents)
        assert report.pages_ingested == 1
        assert report.documents_upserted == 2

    async def test_all_chunks_embedded_in_one_call(
        self, build_service, fetcher_factory, embedder
    ):
        """Every chunk of a page goes to the embedder together, in order."""
        url = f"{BASE}/he/a"
        service = build_service(
            StaticSitemap([url]),
            fetcher_factory({url: page_html("First block.", "Second block.", "  ")}),
        )

        await service.ingest("sitemap.xml", "he")

        assert embedder.document_calls == [["First block.", "Second block."]]

    async def test_page_without_blocks_is_a_no_op(
        self, build_service, fetcher_factory, embedder, store
    ):
        """Zero content blocks: no embedding call, no upsert, not a failure."""
        url = f"{BASE}/he/empty"
        service = build_service(
            StaticSitemap([url]),
            fetcher_factory({url: "<html><body><p>No content blocks</p></body></html>"}),
        )

        report = await service.ingest("sitemap.xml", "he")

        assert embedder.document_calls == []
        assert store.upsert_calls == []
        assert report.pages_empty == 1
        assert report.pages_failed == 0

    async def test_title_and_description_indexed_as_chunks(
        self, build_service, fetcher_factory, embedder, store
    ):
        """With page summaries on, title and description lead the page's chunks."""
        url = f"{BASE}/he/visit"
        html = page_html("Tickets are sold at the gate.", description="Plan your visit")
        service = build_service(
            StaticSitemap([url]), fetcher_factory({url: html}), index_page_summary=True
        )

        await service.ingest("sitemap.xml", "he")

        assert embedder.document_calls == [
            ["Visitor Info", "Plan your visit", "Tickets are sold at the gate."]
        ]
        assert {d.title for d in store.upsert_calls[0]} == {"Visitor Info"}

    async def test_page_summary_skipped_without_blocks(
        self, build_service, fetcher_factory, embedder, store
    ):
        """A page with a title but no content blocks stays empty."""
        url = f"{BASE}/he/empty"
        service = build_service(
            StaticSitemap([url]),
            fetcher_factory({url: page_html(description="Plan your visit")}),
            index_page_summary=True,
        )

        report = await service.ingest("sitemap.xml", "he")

        assert embedder.document_calls == []
        assert store.upsert_calls == []
        assert report.pages_empty == 1

    async def test_page_summary_off_by_default(self, build_service, fetcher_factory, embedder):
        url = f"{BASE}/he/visit"
        html = page_html("Tickets are sold at the gate.", description="Plan your visit")
        service = build_service(StaticSitemap([url]), fetcher_factory({url: html}))

        await service.ingest("sitemap.xml", "he")

        assert embedder.document_calls == [["Tickets are sold at the gate."]]

    async def test_chunks_respect_configured_bounds(
        self, build_service, fetcher_factory, store
    ):
        """Every document but a block's last chunk is within min/max length."""
        block = " ".join(f"Sentence number {i} describes the exhibit." for i in range(300))
        url = f"{BASE}/he/long"
        service = build_service(
            StaticSitemap([url]),
            fetcher_factory({url: page_html(block)}),
            chunk_max_length=500,
            chunk_min_length=250,
        )

        await service.ingest("sitemap.xml", "he")

        texts = [d.text for d in store.upsert_calls[0]]
        assert len(texts) > 2
        assert all(250 <= len(t) <= 500 for t in texts[:-1])
        assert len(texts[-1]) <= 500


class TestRetryAndSkip:
    """Tests for retry policy and page-level failure isolation."""

    async def test_transient_failure_is_retried(self, build_service, store, sleep_recorder):
        """A page failing twice succeeds on the third attempt."""
        url = f"{BASE}/he/flaky"
        fetcher = FlakyFetcher(page_html("Content."), {url: 2})
        service = build_service(StaticSitemap([url]), fetcher)

        report = await service.ingest("sitemap.xml", "he")

        assert fetcher.calls == [url, url, url]
        assert sleep_recorder.delays == [1.0, 2.0]
        assert report.pages_ingested == 1
        assert len(store.upsert_calls) == 1

    async def test_page_skipped_after_retries_exhausted(
        self, build_service, store, sleep_recorder
    ):
        """A persistently failing page is skipped; the run continues."""
        bad, good = f"{BASE}/he/bad", f"{BASE}/he/good"
        fetcher = FlakyFetcher(page_html("Good content."), {bad: 100})
        service = build_service(StaticSitemap([bad, good]), fetcher, item_delay_s=0)

        report = await service.ingest("sitemap.xml", "he")

        assert fetcher.calls.count(bad) == 4  # first attempt + 3 retries
        assert sleep_recorder.delays == [1.0, 2.0, 4.0]
        assert report.pages_failed == 1
        assert report.failed_urls == [bad]
        assert report.pages_ingested == 1
        assert [d.url for d in store.upsert_calls[0]] == [good]

    async def test_non_retryable_error_not_retried(
        self, build_service, fetcher_factory, sleep_recorder
    ):
        """Errors not flagged retryable fail the page immediately."""
        url = f"{BASE}/he/broken"
        fetcher = fetcher_factory({url: ValueError("unexpected payload")})
        service = build_service(StaticSitemap([url]), fetcher)

        report = await service.ingest("sitemap.xml", "he")

        assert fetcher.calls == [url]
        assert sleep_recorder.delays == []
        assert report.failed_urls == [url]

    async def test_sitemap_failure_is_fatal(self, build_service, fetcher_factory):
        """A sitemap that cannot be loaded fails the run."""
        service = build_service(
            StaticSitemap(error=SitemapError("not a urlset")), fetcher_factory({})
        )

        with pytest.raises(SitemapError):
            await service.ingest("sitemap.xml", "he")


class TestBatching:
    """Tests for batching, pacing and concurrency."""

    async def test_batches_run_in_sequence_with_delay_between(
        self, build_service, fetcher_factory, sleep_recorder
    ):
        """25 pages in batches of 10: three batches, two inter-batch pauses."""
        urls = [f"{BASE}/he/page-{i}" for i in range(25)]
        fetcher = fetcher_factory({url: page_html(f"Page {i}.") for i, url in enumerate(urls)})
        service = build_service(
            StaticSitemap(urls), fetcher, item_delay_s=0.5, batch_delay_s=7.0
        )

        report = await service.ingest("sitemap.xml", "he")

        assert sleep_recorder.delays.count(7.0) == 2
        assert set(fetcher.calls[:10]) == set(urls[:10])
        assert set(fetcher.calls[10:20]) == set(urls[10:20])
        assert set(fetcher.calls[20:]) == set(urls[20:])
        assert report.pages_total == 25
        assert report.pages_ingested == 25

    async def test_items_in_a_batch_are_spaced(
        self, build_service, fetcher_factory, sleep_recorder
    ):
        """Item i of a batch waits i * item_delay before starting."""
        urls = [f"{BASE}/he/page-{i}" for i in range(3)]
        fetcher = fetcher_factory({url: page_html("Text.") for url in urls})
        service = build_service(StaticSitemap(urls), fetcher, item_delay_s=0.25)

        await service.ingest("sitemap.xml", "he")

        assert sorted(sleep_recorder.delays) == [0.25, 0.5]

    async def test_concurrency_is_bounded(self, build_service):
        """No more than max_concurrency pages are in flight at once."""
        urls = [f"{BASE}/he/page-{i}" for i in range(8)]
        fetcher = ConcurrencyTracker(page_html("Text."))
        service = build_service(StaticSitemap(urls), fetcher, max_concurrency=2)

        await service.ingest("sitemap.xml", "he")

        assert len(fetcher.calls) == 8
        assert fetcher.max_active <= 2

    def test_invalid_batch_size_rejected(self, build_service, fetcher_factory):
        with pytest.raises(ValueError):
            build_service(StaticSitemap([]), fetcher_factory({}), batch_size=0)


class TestEntryFilter:
    """Tests for sitemap entry selection."""

    async def test_default_filter_excludes_language_paths(
        self, build_service, fetcher_factory
    ):
        """/ar/ and /en/ entries are not fetched."""
        urls = [f"{BASE}/he/a", f"{BASE}/ar/a", f"{BASE}/en/a", f"{BASE}/b"]
        fetcher = fetcher_factory({url: page_html("Text.") for url in urls})
        service = build_service(StaticSitemap(urls), fetcher)

        report = await service.ingest("sitemap.xml", "he")

        assert sorted(fetcher.calls) == [f"{BASE}/b", f"{BASE}/he/a"]
        assert report.pages_total == 2

    async def test_custom_filter_receives_lang(self, build_service, fetcher_factory):
        """A pluggable predicate can use the requested language."""
        urls = [f"{BASE}/he/a", f"{BASE}/en/a"]
        fetcher = fetcher_factory({url: page_html("Text.") for url in urls})
        service = build_service(
            StaticSitemap(urls),
            fetcher,
            entry_filter=lambda entry, lang: f"/{lang}/" in entry.loc,
        )

        await service.ingest("sitemap.xml", "en")

        assert fetcher.calls == [f"{BASE}/en/a"]

    def test_exclude_path_segments_ignores_lang(self):
        entry_filter = exclude_path_segments(["/fr/"])
        assert entry_filter(SitemapEntry(loc=f"{BASE}/fr/x"), "fr") is False
        assert entry_filter(SitemapEntry(loc=f"{BASE}/he/x"), "fr") is True

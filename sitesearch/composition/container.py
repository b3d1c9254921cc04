"""Composition root wiring adapters to the application services."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from google import genai
from qdrant_client import AsyncQdrantClient

from ..adapters.outbound.embedding.gemini_embedder import GeminiEmbedder
from ..adapters.outbound.llm.gemini_keyword_extractor import GeminiKeywordExtractor
from ..adapters.outbound.vector_store.qdrant_adapter import QdrantAdapter
from ..adapters.outbound.web.html_extractor import HtmlContentExtractor
from ..adapters.outbound.web.page_fetcher import HttpPageFetcher
from ..adapters.outbound.web.sitemap_loader import SitemapLoader
from ..common.retry import RetryPolicy
from ..config.settings import Settings
from ..core.domain.exceptions import InvalidConfigurationError
from ..core.ports.document_store_port import DocumentStorePort
from ..core.ports.embedding_port import EmbeddingPort
from ..core.ports.keyword_extractor_port import KeywordExtractorPort
from ..core.ports.page_source_port import PageFetcherPort
from ..core.ports.retriever_port import SparseRetrieverPort
from ..core.services.dense_retriever import DenseRetriever
from ..core.services.hybrid_retriever import HybridRetriever
from ..core.services.ingestion_service import IngestionService, exclude_path_segments
from ..core.services.reranker import RRFusionReranker
from ..core.services.search_service import SearchService
from ..core.services.sparse_retriever import (
    BM25SparseRetriever,
    ContainmentSparseRetriever,
    KeywordExtractionSparseRetriever,
)

logger = logging.getLogger(__name__)


@dataclass
class Container:
    """Every long-lived component of the process, owned in one place."""

    settings: Settings
    store: DocumentStorePort
    embedder: EmbeddingPort
    fetcher: PageFetcherPort
    sparse: SparseRetrieverPort
    hybrid: HybridRetriever
    search_service: SearchService
    ingestion_service: IngestionService

    async def start(self) -> None:
        """Prepare the document store collection and indexes."""
        logger.info("Starting container (collection=%s)", self.settings.qdrant_collection)
        await self.store.ensure_collection()

    async def close(self) -> None:
        """Close network clients."""
        await self.fetcher.close()
        await self.store.close()
        logger.info("Container closed")


def build_sparse_retriever(
    settings: Settings,
    store: DocumentStorePort,
    keyword_extractor: KeywordExtractorPort | None = None,
) -> SparseRetrieverPort:
    """Sparse retriever for the configured ``sparse_strategy``."""
    strategy = settings.sparse_strategy
    if strategy == "containment":
        return ContainmentSparseRetriever(store, settings.tenant_id)
    if strategy == "bm25":
        return BM25SparseRetriever(settings.bm25_index_path, settings.tenant_id)
    if strategy == "llm-keyword-extraction":
        if keyword_extractor is None:
            raise InvalidConfigurationError(
                "llm-keyword-extraction requires a keyword extractor",
                context={"sparse_strategy": strategy},
            )
        return KeywordExtractionSparseRetriever(keyword_extractor, store, settings.tenant_id)
    raise InvalidConfigurationError(
        f"Unknown sparse strategy: {strategy}",
        context={"sparse_strategy": strategy},
    )


def build_container(settings: Settings) -> Container:
    """Construct every component from ``settings``.

    Raises:
        ConfigurationError: If required settings are missing.
    """
    settings.validate_required()
    logger.info("Building container (sparse strategy: %s)", settings.sparse_strategy)

    genai_client = genai.Client(api_key=settings.google_api_key)
    qdrant_client = AsyncQdrantClient(
        url=settings.qdrant_url,
        api_key=settings.qdrant_api_key or None,
        timeout=settings.qdrant_timeout_s,
    )

    store = QdrantAdapter(
        qdrant_client,
        collection_name=settings.qdrant_collection,
        embedding_dimension=settings.embedding_dimension,
    )
    embedder = GeminiEmbedder(
        genai_client,
        model_name=settings.embedding_model,
        dimension=settings.embedding_dimension,
        timeout_s=settings.embedding_timeout_s,
    )
    fetcher = HttpPageFetcher(timeout_s=settings.http_timeout_s)
    keyword_extractor = GeminiKeywordExtractor(
        genai_client,
        model_name=settings.keyword_model,
        timeout_s=settings.retrieval_branch_timeout_s,
    )

    retry_policy = RetryPolicy(
        max_retries=settings.ingestion_max_retries,
        base_delay_s=settings.ingestion_retry_base_delay_ms / 1000,
        max_delay_s=settings.ingestion_retry_max_delay_ms / 1000,
    )

    sparse = build_sparse_retriever(settings, store, keyword_extractor)
    hybrid = HybridRetriever(
        dense=DenseRetriever(embedder, store, settings.tenant_id),
        sparse=sparse,
        reranker=RRFusionReranker(settings.rrf_k),
        branch_timeout_s=settings.retrieval_branch_timeout_s,
        absent_rank_mode=settings.absent_rank_mode,
    )
    search_service = SearchService(
        hybrid,
        top_k=settings.search_top_k,
        pre_rerank_k=settings.search_pre_rerank_k,
        max_query_length=settings.max_query_length,
    )
    ingestion_service = IngestionService(
        sitemap_loader=SitemapLoader(fetcher, retry_policy),
        fetcher=fetcher,
        extractor=HtmlContentExtractor(settings.content_selector),
        embedder=embedder,
        store=store,
        tenant_id=settings.tenant_id,
        batch_size=settings.ingestion_batch_size,
        max_concurrency=settings.ingestion_max_concurrency,
        item_delay_s=settings.ingestion_item_delay_ms / 1000,
        batch_delay_s=settings.ingestion_batch_delay_ms / 1000,
        retry_policy=retry_policy,
        chunk_max_length=settings.max_chunk_length,
        chunk_min_length=settings.chunk_min_length,
        chunk_overlap=settings.chunk_overlap,
        entry_filter=exclude_path_segments(settings.excluded_path_segments),
        index_page_summary=settings.index_page_summary,
    )

    return Container(
        settings=settings,
        store=store,
        embedder=embedder,
        fetcher=fetcher,
        sparse=sparse,
        hybrid=hybrid,
        search_service=search_service,
        ingestion_service=ingestion_service,
    )

"""Port interfaces between the core and its adapters."""

from .document_store_port import DocumentStorePort
from .embedding_port import EmbeddingPort
from .keyword_extractor_port import KeywordExtractorPort
from .page_source_port import ContentExtractorPort, PageFetcherPort, SitemapLoaderPort
from .retriever_port import DenseRetrieverPort, SparseRetrieverPort

__all__ = [
    "ContentExtractorPort",
    "DenseRetrieverPort",
    "DocumentStorePort",
    "EmbeddingPort",
    "KeywordExtractorPort",
    "PageFetcherPort",
    "SitemapLoaderPort",
    "SparseRetrieverPort",
]

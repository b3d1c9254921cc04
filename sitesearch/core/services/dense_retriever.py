"""Dense (semantic) retrieval over stored embeddings."""

import logging

from ..domain import Document
from ..ports.document_store_port import DocumentStorePort
from ..ports.embedding_port import EmbeddingPort
from ..ports.retriever_port import DenseRetrieverPort

logger = logging.getLogger(__name__)


class DenseRetriever(DenseRetrieverPort):
    """Embeds the query and returns the tenant's nearest documents.

    Embedding and store errors propagate; the hybrid retriever treats them
    as an unavailable branch.
    """

    def __init__(self, embedder: EmbeddingPort, store: DocumentStorePort, tenant_id: str) -> None:
        self.embedder = embedder
        self.store = store
        self.tenant_id = tenant_id

    async def retrieve(self, query: str, k: int) -> list[Document]:
        """Up to ``k`` documents, nearest first."""
        embedding = await self.embedder.embed_query(query)
        results = await self.store.query_by_vector(embedding, k, self.tenant_id)
        logger.info("Dense search retrieved %d documents", len(results))
        return [result.document for result in results]

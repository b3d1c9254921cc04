"""Qdrant document store.

One collection holds every tenant's chunks. Reads are always filtered on the
``tenant_id`` payload field; containment search uses Qdrant's full-text
payload index on ``text``.
"""

import logging

from qdrant_client import AsyncQdrantClient, models

from ....core.domain import Document, SearchResult
from ....core.domain.exceptions import (
    InvalidDocumentError,
    StoreConnectionError,
    StoreQueryError,
    StoreUpsertError,
)
from ....core.ports.document_store_port import DocumentStorePort

logger = logging.getLogger(__name__)

UPSERT_BATCH_SIZE = 100


def _tenant_filter(tenant_id: str, *extra: models.FieldCondition) -> models.Filter:
    return models.Filter(
        must=[
            models.FieldCondition(key="tenant_id", match=models.MatchValue(value=tenant_id)),
            *extra,
        ]
    )


class QdrantAdapter(DocumentStorePort):
    """Qdrant-backed document store."""

    def __init__(
        self,
        client: AsyncQdrantClient,
        collection_name: str = "site_documents",
        embedding_dimension: int = 1536,
    ) -> None:
        """Initialize the adapter.

        Args:
            client: Async Qdrant client owned by the composition root.
            collection_name: Collection holding all documents.
            embedding_dimension: Vector size of the collection.
        """
        self._client = client
        self.collection_name = collection_name
        self.embedding_dimension = embedding_dimension

    async def ensure_collection(self) -> None:
        """Create the collection and its payload indexes if they are missing."""
        try:
            if not await self._client.collection_exists(self.collection_name):
                logger.info("Creating collection %s", self.collection_name)
                await self._client.create_collection(
                    collection_name=self.collection_name,
                    vectors_config=models.VectorParams(
                        size=self.embedding_dimension,
                        distance=models.Distance.COSINE,
                    ),
                )

            # 'tenant_id' scopes every query
            await self._client.create_payload_index(
                collection_name=self.collection_name,
                field_name="tenant_id",
                field_schema=models.PayloadSchemaType.KEYWORD,
            )
            # 'text' backs containment search
            await self._client.create_payload_index(
                collection_name=self.collection_name,
                field_name="text",
                field_schema=models.TextIndexParams(
                    type=models.TextIndexType.TEXT,
                    tokenizer=models.TokenizerType.WORD,
                    lowercase=True,
                ),
            )
        except Exception as e:
            raise StoreConnectionError(
                f"Failed to prepare collection {self.collection_name}",
                cause=e,
                context={"collection": self.collection_name},
            ) from e

    async def upsert_many(self, documents: list[Document]) -> int:
        """Insert or replace documents keyed by id.

        Args:
            documents: Documents with embeddings populated.

        Returns:
            Number of documents written.
        """
        if not documents:
            return 0

        points = []
        for doc in documents:
            if doc.embedding is None:
                raise InvalidDocumentError(
                    "Document has no embedding",
                    context={"doc_id": doc.id, "url": doc.url},
                )
            points.append(
                models.PointStruct(id=doc.id, vector=doc.embedding, payload=doc.to_payload())
            )

        try:
            for i in range(0, len(points), UPSERT_BATCH_SIZE):
                await self._client.upsert(
                    collection_name=self.collection_name,
                    points=points[i : i + UPSERT_BATCH_SIZE],
                    wait=True,
                )
        except Exception as e:
            raise StoreUpsertError(
                f"Failed to upsert {len(points)} documents",
                cause=e,
                context={"collection": self.collection_name},
            ) from e

        logger.debug("Upserted %d documents to %s", len(points), self.collection_name)
        return len(points)

    async def query_by_vector(
        self, embedding: list[float], k: int, tenant_id: str
    ) -> list[SearchResult]:
        """Nearest neighbours of ``embedding`` within the tenant, nearest first."""
        try:
            response = await self._client.query_points(
                collection_name=self.collection_name,
                query=embedding,
                query_filter=_tenant_filter(tenant_id),
                limit=k,
                with_payload=True,
            )
        except Exception as e:
            raise StoreQueryError(
                "Vector query failed",
                cause=e,
                context={"collection": self.collection_name, "k": k},
            ) from e

        return [
            SearchResult(
                document=Document.from_payload(dict(point.payload or {}), point.id),
                score=point.score,
            )
            for point in response.points
        ]

    async def query_by_containment(self, text: str, k: int, tenant_id: str) -> list[Document]:
        """Documents within the tenant whose text matches ``text``.

        Matching is case-insensitive and done by the full-text index: every
        word of ``text`` must appear in the chunk.
        """
        try:
            points, _ = await self._client.scroll(
                collection_name=self.collection_name,
                scroll_filter=_tenant_filter(
                    tenant_id,
                    models.FieldCondition(key="text", match=models.MatchText(text=text)),
                ),
                limit=k,
                with_payload=True,
                with_vectors=False,
            )
        except Exception as e:
            raise StoreQueryError(
                "Containment query failed",
                cause=e,
                context={"collection": self.collection_name, "k": k},
            ) from e

        return [Document.from_payload(dict(point.payload or {}), point.id) for point in points]

    async def scroll_documents(self, tenant_id: str, batch_size: int = 256) -> list[Document]:
        """Every document stored for ``tenant_id``, without vectors."""
        documents: list[Document] = []
        offset = None
        try:
            while True:
                points, offset = await self._client.scroll(
                    collection_name=self.collection_name,
                    scroll_filter=_tenant_filter(tenant_id),
                    limit=batch_size,
                    offset=offset,
                    with_payload=True,
                    with_vectors=False,
                )
                documents.extend(
                    Document.from_payload(dict(point.payload or {}), point.id) for point in points
                )
                if offset is None:
                    break
        except Exception as e:
            raise StoreQueryError(
                "Failed to scroll documents",
                cause=e,
                context={"collection": self.collection_name},
            ) from e
        return documents

    async def count(self, tenant_id: str) -> int:
        """Exact number of documents stored for ``tenant_id``."""
        try:
            result = await self._client.count(
                collection_name=self.collection_name,
                count_filter=_tenant_filter(tenant_id),
                exact=True,
            )
        except Exception as e:
            raise StoreConnectionError(
                "Failed to count documents",
                cause=e,
                context={"collection": self.collection_name},
            ) from e
        return result.count

    async def close(self) -> None:
        await self._client.close()

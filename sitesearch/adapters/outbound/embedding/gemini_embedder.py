"""Gemini embeddings over the google.genai async client."""

import asyncio
import logging

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from ....core.domain.exceptions import (
    EmbeddingAPIError,
    EmbeddingError,
    EmbeddingRateLimitError,
    EmbeddingTimeoutError,
)
from ....core.ports.embedding_port import EmbeddingPort

logger = logging.getLogger(__name__)

# Gemini accepts at most 100 contents per embed_content request
EMBEDDING_BATCH_SIZE = 100


class GeminiEmbedder(EmbeddingPort):
    """Embedding function using the Google Gemini API.

    The same model and output dimension are used for documents and queries,
    only the task type differs. Errors are raised, never papered over with
    zero vectors: a failed page embed is retried or skipped by the caller.
    """

    def __init__(
        self,
        client: genai.Client,
        model_name: str = "gemini-embedding-001",
        dimension: int = 1536,
        timeout_s: float = 30.0,
    ) -> None:
        self._client = client
        self.model_name = model_name
        self.dimension = dimension
        self.timeout_s = timeout_s

    async def embed_query(self, text: str) -> list[float]:
        """Generate embedding for a single query text."""
        embeddings = await self._embed_texts([text], task_type="RETRIEVAL_QUERY")
        return embeddings[0]

    async def embed_documents(self, texts: list[str]) -> list[list[float]]:
        """Generate embeddings for multiple documents, in input order."""
        if not texts:
            return []

        all_embeddings: list[list[float]] = []
        for i in range(0, len(texts), EMBEDDING_BATCH_SIZE):
            batch = texts[i : i + EMBEDDING_BATCH_SIZE]
            all_embeddings.extend(await self._embed_texts(batch, "RETRIEVAL_DOCUMENT"))
        return all_embeddings

    async def _embed_texts(self, texts: list[str], task_type: str) -> list[list[float]]:
        config = types.EmbedContentConfig(
            task_type=task_type,
            output_dimensionality=self.dimension,
        )
        try:
            result = await asyncio.wait_for(
                self._client.aio.models.embed_content(
                    model=self.model_name,
                    contents=texts,
                    config=config,
                ),
                timeout=self.timeout_s,
            )
        except TimeoutError as e:
            raise EmbeddingTimeoutError(
                f"Embedding request timed out after {self.timeout_s}s",
                cause=e,
                context={"model": self.model_name, "batch_size": len(texts)},
            ) from e
        except genai_errors.APIError as e:
            if e.code == 429:
                raise EmbeddingRateLimitError(
                    "Embedding rate limit hit",
                    cause=e,
                    context={"model": self.model_name},
                ) from e
            raise EmbeddingAPIError(
                f"Embedding request failed with status {e.code}",
                cause=e,
                context={"model": self.model_name, "status": e.code},
            ) from e
        except httpx.HTTPError as e:
            raise EmbeddingAPIError(
                f"Embedding request failed: {e}",
                cause=e,
                context={"model": self.model_name},
            ) from e

        embeddings = [list(emb.values or []) for emb in (result.embeddings or [])]
        if len(embeddings) != len(texts):
            raise EmbeddingError(
                "Embedding response size does not match request",
                context={"expected": len(texts), "received": len(embeddings)},
            )
        for values in embeddings:
            if len(values) != self.dimension:
                raise EmbeddingError(
                    "Embedding dimension mismatch",
                    context={"expected": self.dimension, "received": len(values)},
                )

        logger.debug("Embedded %d texts (%s)", len(texts), task_type)
        return embeddings

"""Search keyword extraction with Gemini."""

import asyncio
import json
import logging

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from ....core.domain.exceptions import RetrievalError
from ....core.domain.utils import normalize_text
from ....core.ports.keyword_extractor_port import KeywordExtractorPort

logger = logging.getLogger(__name__)

MAX_KEYWORDS = 5

KEYWORD_PROMPT = """Extract the most important search keywords from the user question below.
Return a JSON array of at most {max_keywords} short keywords or key phrases, most important first.
Keep the language of the question. Do not add words that are not implied by the question.

Question: {query}"""


class GeminiKeywordExtractor(KeywordExtractorPort):
    """Asks a Gemini model for the keywords of a query as a JSON string array."""

    def __init__(
        self,
        client: genai.Client,
        model_name: str = "gemini-2.0-flash",
        max_keywords: int = MAX_KEYWORDS,
        timeout_s: float = 15.0,
    ) -> None:
        self._client = client
        self.model_name = model_name
        self.max_keywords = max_keywords
        self.timeout_s = timeout_s

    async def extract_keywords(self, query: str) -> list[str]:
        """Extract keywords from ``query``.

        Args:
            query: The user's question.

        Returns:
            Distinct keywords, most important first, at most ``max_keywords``.

        Raises:
            RetrievalError: If the model call fails or returns malformed output.
        """
        prompt = KEYWORD_PROMPT.format(max_keywords=self.max_keywords, query=normalize_text(query))
        try:
            response = await asyncio.wait_for(
                self._client.aio.models.generate_content(
                    model=self.model_name,
                    contents=prompt,
                    config=types.GenerateContentConfig(
                        temperature=0.0,
                        response_mime_type="application/json",
                        response_schema=list[str],
                    ),
                ),
                timeout=self.timeout_s,
            )
            raw = json.loads(response.text or "[]")
        except (TimeoutError, genai_errors.APIError, httpx.HTTPError, json.JSONDecodeError) as e:
            raise RetrievalError(
                "Keyword extraction failed",
                cause=e,
                context={"model": self.model_name},
            ) from e

        if not isinstance(raw, list):
            raise RetrievalError(
                "Keyword extraction returned a non-list response",
                context={"model": self.model_name, "type": type(raw).__name__},
            )

        keywords: list[str] = []
        seen: set[str] = set()
        for item in raw:
            keyword = normalize_text(str(item))
            if keyword and keyword.lower() not in seen:
                seen.add(keyword.lower())
                keywords.append(keyword)

        logger.debug("Extracted keywords %s from query", keywords)
        return keywords[: self.max_keywords]

"""Search endpoint."""

import logging

from fastapi import APIRouter, Depends

from .....core.domain.utils import normalize_text
from .....core.services.search_service import SearchService
from ..deps import get_search_service
from ..models import ErrorResponse, SearchHitModel, SearchRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["search"])


@router.post(
    "/search",
    response_model=list[SearchHitModel],
    responses={
        400: {"model": ErrorResponse, "description": "Invalid query"},
        500: {"model": ErrorResponse, "description": "Internal server error"},
    },
)
async def search(
    request: SearchRequest,
    service: SearchService = Depends(get_search_service),
) -> list[SearchHitModel]:
    """Run a hybrid search.

    Validation errors propagate to the global handler as 400 responses. A
    degraded retriever yields an empty list, not an error.

    Args:
        request: The search request.

    Returns:
        Result documents, best first.
    """
    hits = await service.search(normalize_text(request.query))
    logger.info("Search returned %d results", len(hits))
    return [
        SearchHitModel(text=hit.text, url=hit.url, score=hit.score, title=hit.title)
        for hit in hits
    ]

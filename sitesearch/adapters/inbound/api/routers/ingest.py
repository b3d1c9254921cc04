"""Ingestion endpoint."""

import logging

from fastapi import APIRouter, BackgroundTasks, Depends, status

from .....common.exception_handler import log_exception
from .....core.services.ingestion_service import IngestionService
from ..deps import get_ingestion_service
from ..models import IngestAcceptedResponse, IngestRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["ingest"])


async def run_ingestion(service: IngestionService, url: str, lang: str) -> None:
    """Run one ingestion in the background, logging instead of raising."""
    try:
        report = await service.ingest(url, lang)
        logger.info(
            "Background ingestion of %s done: %d/%d pages, %d documents",
            url,
            report.pages_ingested,
            report.pages_total,
            report.documents_upserted,
        )
    except Exception as e:
        log_exception(e, log=logger, extra_context={"url": url, "lang": lang})


@router.post(
    "/ingest",
    response_model=IngestAcceptedResponse,
    status_code=status.HTTP_202_ACCEPTED,
)
async def ingest(
    request: IngestRequest,
    background_tasks: BackgroundTasks,
    service: IngestionService = Depends(get_ingestion_service),
) -> IngestAcceptedResponse:
    """Accept an ingestion request and run it after responding."""
    logger.info("Accepted ingestion of %s (lang=%s)", request.url, request.lang)
    background_tasks.add_task(run_ingestion, service, request.url, request.lang)
    return IngestAcceptedResponse(url=request.url, lang=request.lang)

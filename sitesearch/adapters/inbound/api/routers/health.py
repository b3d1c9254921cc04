"""Health check endpoints."""

import logging

from fastapi import APIRouter, Depends

from .....composition.container import Container
from ..deps import get_container
from ..models import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])

API_VERSION = "1.0.0"


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Basic health check endpoint.

    Returns:
        HealthResponse with current status and version.
    """
    return HealthResponse(
        status="healthy",
        version=API_VERSION,
        document_store="not_checked",
    )


@router.get("/ready", response_model=HealthResponse)
async def readiness_check(container: Container = Depends(get_container)) -> HealthResponse:
    """Readiness probe.

    Checks that the document store is reachable and counts the tenant's
    documents.

    Returns:
        HealthResponse with detailed status.
    """
    try:
        total = await container.store.count(container.settings.tenant_id)
        store_status = f"connected ({total} docs)"
        status = "ready"
    except Exception as e:
        logger.warning("Readiness check failed: %s", e)
        store_status = f"error: {e}"
        status = "degraded"

    return HealthResponse(status=status, version=API_VERSION, document_store=store_status)

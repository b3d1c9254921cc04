"""FastAPI dependency injection for sitesearch.

The container is created in the application lifespan and stored on
``app.state``; dependencies read it from the request.
"""

from fastapi import Request

from ....composition.container import Container
from ....core.services.ingestion_service import IngestionService
from ....core.services.search_service import SearchService


def get_container(request: Request) -> Container:
    return request.app.state.container


def get_search_service(request: Request) -> SearchService:
    return get_container(request).search_service


def get_ingestion_service(request: Request) -> IngestionService:
    return get_container(request).ingestion_service

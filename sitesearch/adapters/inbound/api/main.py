"""FastAPI application for the sitesearch API."""

import logging
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ....common.exception_handler import (
    format_exception_json,
    get_http_status_code,
    log_exception,
)
from ....composition.container import Container, build_container
from ....config.logging import setup_logging
from ....config.settings import Settings, settings
from ....core.domain.exceptions import SiteSearchError
from .routers import health, ingest, search

logger = logging.getLogger(__name__)


def create_app(
    app_settings: Settings | None = None,
    container_factory: Callable[[Settings], Container] = build_container,
) -> FastAPI:
    """Create the API application.

    Args:
        app_settings: Settings to use; defaults to the global settings.
        container_factory: Builds the container at startup.

    Returns:
        Configured FastAPI application.
    """
    config = app_settings or settings
    debug_mode = config.debug

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        setup_logging(config.log_level, log_file=config.log_file, json_format=config.log_json)
        logger.info("sitesearch API starting up...")
        logger.info("Debug mode: %s", "ENABLED" if debug_mode else "DISABLED")

        container = container_factory(config)
        await container.start()
        app.state.container = container
        try:
            yield
        finally:
            logger.info("sitesearch API shutting down...")
            await container.close()

    app = FastAPI(
        title="sitesearch API",
        description="Hybrid dense and keyword search over ingested site content.",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health.router)
    app.include_router(search.router)
    app.include_router(ingest.router)

    # =========================================================================
    # Global Exception Handlers
    # =========================================================================

    @app.exception_handler(SiteSearchError)
    async def sitesearch_error_handler(request: Request, exc: SiteSearchError) -> JSONResponse:
        """Handle all SiteSearchError exceptions with structured JSON response."""
        log_exception(exc, extra_context={"path": str(request.url.path), "method": request.method})

        return JSONResponse(
            status_code=get_http_status_code(exc),
            content=exc.to_dict(include_trace=debug_mode),
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Handle all unhandled exceptions with structured JSON response."""
        log_exception(exc, extra_context={"path": str(request.url.path), "method": request.method})

        return JSONResponse(
            status_code=get_http_status_code(exc),
            content=format_exception_json(exc, include_trace=debug_mode),
        )

    return app


# Export for uvicorn: uvicorn sitesearch.adapters.inbound.api.main:app
app = create_app()

__all__ = ["app", "create_app"]

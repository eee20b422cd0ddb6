#!/usr/bin/env python3
"""
Price Archive API - upload price archives and download filtered exports.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.engine import Engine

from api.middleware.logging import LoggingMiddleware
from api.routers import health, prices
from core.config import Settings, settings
from core.errors import ArchiveCorrupt, BadInput, StorageFailure
from core.logging_config import configure_logging
from db.session import create_db_engine, create_session_factory, init_db

logger = logging.getLogger(__name__)


def create_app(app_settings: Optional[Settings] = None, engine: Optional[Engine] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        app_settings: Settings to use, defaults to the environment-loaded settings
        engine: Existing engine to serve from; when omitted one is created at
            startup from ``database_url`` and disposed at shutdown
    """
    app_settings = app_settings or settings
    configure_logging(app_settings.log_level, app_settings.json_logs)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = engine is None
        app_engine = create_db_engine(app_settings.database_url, echo=app_settings.debug) if owned else engine
        init_db(app_engine, app_settings.identifier_mode)
        app.state.engine = app_engine
        app.state.session_factory = create_session_factory(app_engine)
        logger.info(f"Price store ready, identifier mode: {app_settings.identifier_mode}")
        try:
            yield
        finally:
            if owned:
                app_engine.dispose()
                logger.info("Database engine disposed")

    app = FastAPI(
        title=app_settings.project_name,
        version=app_settings.version,
        description="Ingest zip/tar archives of CSV price records and export filtered prices as zipped CSV",
        lifespan=lifespan,
    )
    app.state.settings = app_settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.allowed_origins,
        allow_credentials=True,
        allow_methods=app_settings.allowed_methods,
        allow_headers=app_settings.allowed_headers,
    )
    app.add_middleware(LoggingMiddleware)

    @app.exception_handler(BadInput)
    async def bad_input_handler(request: Request, exc: BadInput):
        logger.warning(f"Rejected request to {request.url.path}: {exc}")
        return JSONResponse(status_code=400, content={"error": str(exc)})

    @app.exception_handler(ArchiveCorrupt)
    async def archive_corrupt_handler(request: Request, exc: ArchiveCorrupt):
        logger.warning(f"Unreadable archive on {request.url.path}: {exc}")
        return JSONResponse(status_code=422, content={"error": str(exc)})

    @app.exception_handler(StorageFailure)
    async def storage_failure_handler(request: Request, exc: StorageFailure):
        logger.error(f"Storage failure on {request.url.path}: {exc}")
        return JSONResponse(status_code=500, content={"error": "database error"})

    # Expose health checks both at root and versioned paths
    app.include_router(health.router)
    app.include_router(health.router, prefix=app_settings.api_v1_prefix)
    app.include_router(prices.router, prefix=app_settings.api_v1_prefix)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.api_host, port=settings.api_port)

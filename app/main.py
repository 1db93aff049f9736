"""Main application entry point with app factory and lifespan management."""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.api.app import create_api_app
from app.core.config import settings
from app.core.logging import get_logger, log_fields, setup_logging
from app.database.connection import close_database, create_tables, init_database
from app.jobs import start_scheduler, stop_scheduler
from app.services.content_refresh import preload_on_startup
import app.jobs.definitions  # noqa: F401 - register jobs

logger = get_logger("main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start the database, scheduler and cache warm-up; tear down in reverse."""
    setup_logging()
    logger.info(
        f"Starting {settings.app_name} v{settings.app_version}",
        extra=log_fields(environment=settings.environment, snapshot_timezone=settings.snapshot_timezone),
    )

    await init_database()

    # Production schema is managed by Alembic
    if settings.is_development:
        await create_tables()

    await start_scheduler()

    # Warm today's content cache without delaying startup
    preload_task: asyncio.Task | None = None
    if settings.content_refresh_on_startup:
        preload_task = asyncio.create_task(preload_on_startup())

    try:
        yield
    finally:
        logger.info("Shutting down")
        if preload_task is not None and not preload_task.done():
            preload_task.cancel()
            try:
                await preload_task
            except asyncio.CancelledError:
                logger.info("Startup content refresh cancelled")

        await stop_scheduler()
        await close_database()
        logger.info("Shutdown complete")


def create_app() -> FastAPI:
    """Create the main FastAPI application."""
    api_app = create_api_app()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )

    # Mount API
    app.mount("/api", api_app)

    @app.get("/")
    async def root():
        return {
            "name": settings.app_name,
            "version": settings.app_version,
            "docs": "/api/docs" if settings.debug else None,
            "health": "/api/health",
        }

    return app


# Application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )

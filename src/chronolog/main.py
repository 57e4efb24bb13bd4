"""FastAPI application factory."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from chronolog.activities.router import router as activities_router
from chronolog.auth.router import router as auth_router
from chronolog.catalog.client import CatalogFetchError, DataDragonClient
from chronolog.catalog.router import router as catalog_router
from chronolog.catalog.store import CatalogStore
from chronolog.config import get_settings
from chronolog.database import close_db, init_db
from chronolog.health.router import router as health_router
from chronolog.middleware import setup_middleware
from chronolog.redis_client import close_redis, init_redis
from chronolog.rewards.router import router as rewards_router
from chronolog.taxonomy.router import categories_router, tags_router
from chronolog.tracking.router import resume_router
from chronolog.tracking.router import router as time_entries_router

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup and shutdown lifecycle."""
    settings = get_settings()
    await init_db(settings)
    await init_redis(settings.redis_url)

    # An empty catalog still serves everything except reward draws (503).
    if settings.catalog_refresh_on_startup:
        try:
            await app.state.catalog.refresh(app.state.catalog_client)
        except CatalogFetchError as e:
            logger.warning("catalog_startup_refresh_failed", error=str(e))

    yield

    await close_db()
    await close_redis()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="Chronolog API",
        description="Personal time tracking with collectible rewards for tracked time",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )
    app.state.catalog = CatalogStore()
    app.state.catalog_client = DataDragonClient.from_settings(settings)

    setup_middleware(app, settings)
    app.include_router(health_router, tags=["Health"])
    app.include_router(auth_router)
    app.include_router(categories_router)
    app.include_router(tags_router)
    app.include_router(activities_router)
    app.include_router(time_entries_router)
    app.include_router(resume_router)
    app.include_router(rewards_router)
    app.include_router(catalog_router)

    return app


app = create_app()

"""FastAPI application entry point."""
import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.routers import bookmarks, health, statistics, tags, upload
from core.config import get_settings
from db.session import async_session_factory
from services.tag_service import ensure_standard_tags
from tasks.view_refresh import ViewRefreshScheduler

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Manage application lifespan - startup and shutdown."""
    app_settings = get_settings()
    logging.basicConfig(
        level=app_settings.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    # Startup: the standard tags must exist before any request can reference them
    async with async_session_factory() as session:
        await ensure_standard_tags(session)
        await session.commit()

    # Startup: background refresh of the bookmark_views projection
    scheduler: ViewRefreshScheduler | None = None
    if app_settings.view_refresh_enabled:
        scheduler = ViewRefreshScheduler(
            async_session_factory,
            interval_seconds=app_settings.view_refresh_interval_seconds,
        )
        scheduler.start()
    else:
        logger.info("View refresh scheduler disabled")
    app.state.view_refresh_scheduler = scheduler

    yield

    # Shutdown: stop the refresher before the pool goes away
    if scheduler is not None:
        await scheduler.stop()
    app.state.view_refresh_scheduler = None


app_settings = get_settings()

app = FastAPI(
    title="TweetVault API",
    description="Imports bookmark exports and serves them with tags and search.",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=app_settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type"],
)

app.include_router(health.router)
app.include_router(upload.router, prefix="/api")
app.include_router(bookmarks.router, prefix="/api")
app.include_router(tags.router, prefix="/api")
app.include_router(statistics.router, prefix="/api")

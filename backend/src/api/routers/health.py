"""Health check endpoints."""
import logging

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from db.session import get_async_session


logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    database: str
    view_refresh: str  # "running", "stopped" or "disabled"


@router.get("/health", response_model=HealthResponse)
async def health_check(
    request: Request,
    db: AsyncSession = Depends(get_async_session),
) -> HealthResponse:
    """Check application and database health, and whether the view refresher runs."""
    db_status = "healthy"
    try:
        await db.execute(text("SELECT 1"))
    except Exception:
        logger.exception("Database health check failed")
        db_status = "unhealthy"

    scheduler = getattr(request.app.state, "view_refresh_scheduler", None)
    if scheduler is None:
        view_refresh = "disabled"
    else:
        view_refresh = "running" if scheduler.is_running else "stopped"

    return HealthResponse(
        status="healthy" if db_status == "healthy" else "degraded",
        database=db_status,
        view_refresh=view_refresh,
    )

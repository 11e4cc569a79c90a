"""Bookmark statistics endpoint."""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_async_session
from schemas.bookmark import StatisticsResponse, TagUsage
from services import bookmark_service

router = APIRouter(tags=["statistics"])


@router.get("/statistics", response_model=StatisticsResponse)
async def get_statistics(
    db: AsyncSession = Depends(get_async_session),
) -> StatisticsResponse:
    """Bookmark totals and the five most used tags among active bookmarks."""
    stats = await bookmark_service.get_statistics(db)
    return StatisticsResponse(
        total_bookmarks=stats.total_bookmarks,
        active_bookmarks=stats.active_bookmarks,
        archived_bookmarks=stats.archived_bookmarks,
        total_tags=stats.total_tags,
        top_tags=[TagUsage(name=name, count=count) for name, count in stats.top_tags],
    )

"""Service layer for the bookmark_views materialized view."""
import logging

from sqlalchemy import cast, func, or_, select, text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.ext.asyncio import AsyncSession

from db.views import REFRESH_BOOKMARK_VIEW_SQL
from models.bookmark_view import BookmarkView
from services.utils import escape_ilike

logger = logging.getLogger(__name__)


async def refresh_bookmark_view(db: AsyncSession) -> None:
    """
    Rebuild the materialized view from the primary tables.

    Runs CONCURRENTLY so readers keep seeing the previous contents until the new
    ones are swapped in. Does not commit; the caller owns the transaction.
    """
    await db.execute(text(REFRESH_BOOKMARK_VIEW_SQL))


async def list_bookmarks_from_view(
    db: AsyncSession,
    tag: str | None = None,
    search: str | None = None,
    archived: bool = False,
    offset: int = 0,
    limit: int = 12,
) -> tuple[list[BookmarkView], int]:
    """
    List bookmarks from the materialized view, newest first.

    Args:
        db: Database session.
        tag: Exact tag name the bookmark must carry.
        search: Case-insensitive substring matched against text, name and handle.
        archived: List archived bookmarks instead of active ones.
        offset: Pagination offset.
        limit: Pagination limit.

    Returns:
        Tuple of (page of view rows, total matching rows).
    """
    filters = [BookmarkView.archived.is_(archived)]

    if tag:
        # tags_json is text; containment needs jsonb
        filters.append(
            cast(BookmarkView.tags_json, JSONB).contains([{"name": tag}]),
        )

    if search:
        pattern = f"%{escape_ilike(search)}%"
        filters.append(
            or_(
                BookmarkView.full_text.ilike(pattern),
                BookmarkView.name.ilike(pattern),
                BookmarkView.screen_name.ilike(pattern),
            ),
        )

    count_result = await db.execute(
        select(func.count()).select_from(BookmarkView).where(*filters),
    )
    total = count_result.scalar_one()

    result = await db.execute(
        select(BookmarkView)
        .where(*filters)
        .order_by(BookmarkView.created_at.desc(), BookmarkView.id.desc())
        .offset(offset)
        .limit(limit),
    )
    return list(result.scalars()), total

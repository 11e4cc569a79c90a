"""Service layer for bookmark reads and user-side updates."""
import logging
from dataclasses import dataclass, field

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload, undefer

from models.bookmark import Bookmark
from models.media import Media
from models.tag import BookmarkTag, Tag
from services.exceptions import BookmarkNotFoundError

logger = logging.getLogger(__name__)

TOP_TAGS_LIMIT = 5


class MediaNotFoundError(Exception):
    """Raised when a media item doesn't exist or has no stored payload."""

    def __init__(self, bookmark_id: str, media_id: int) -> None:
        self.bookmark_id = bookmark_id
        self.media_id = media_id
        super().__init__(f"Media {media_id} for bookmark '{bookmark_id}' not found")


@dataclass
class BookmarkStatistics:
    """Totals across all bookmarks and tags."""

    total_bookmarks: int = 0
    active_bookmarks: int = 0
    archived_bookmarks: int = 0
    total_tags: int = 0
    top_tags: list[tuple[str, int]] = field(default_factory=list)


async def get_bookmark(db: AsyncSession, bookmark_id: str) -> Bookmark:
    """
    Get a bookmark with its media (without payloads) and tag links.

    Reads the primary tables, so the result reflects changes the view may not
    have picked up yet.

    Raises:
        BookmarkNotFoundError: If the bookmark doesn't exist.
    """
    result = await db.execute(
        select(Bookmark)
        .options(
            selectinload(Bookmark.media),
            selectinload(Bookmark.tag_links),
        )
        .where(Bookmark.id == bookmark_id)
        .execution_options(populate_existing=True),
    )
    bookmark = result.scalar_one_or_none()
    if bookmark is None:
        raise BookmarkNotFoundError(bookmark_id)
    return bookmark


async def delete_bookmark(db: AsyncSession, bookmark_id: str) -> None:
    """
    Delete a bookmark together with its media and tag links.

    Raises:
        BookmarkNotFoundError: If the bookmark doesn't exist.
    """
    # Children go explicitly first, mirroring the FK cascades, so the delete
    # doesn't depend on the ON DELETE clauses having been migrated.
    await db.execute(delete(BookmarkTag).where(BookmarkTag.bookmark_id == bookmark_id))
    await db.execute(delete(Media).where(Media.bookmark_id == bookmark_id))
    result = await db.execute(delete(Bookmark).where(Bookmark.id == bookmark_id))
    if result.rowcount == 0:
        raise BookmarkNotFoundError(bookmark_id)
    await db.flush()


async def toggle_archive(db: AsyncSession, bookmark_id: str) -> bool:
    """
    Flip a bookmark's archived flag.

    Returns:
        The new value of the flag.

    Raises:
        BookmarkNotFoundError: If the bookmark doesn't exist.
    """
    result = await db.execute(
        update(Bookmark)
        .where(Bookmark.id == bookmark_id)
        .values(archived=~Bookmark.archived)
        .returning(Bookmark.archived),
    )
    archived = result.scalar_one_or_none()
    if archived is None:
        raise BookmarkNotFoundError(bookmark_id)
    return archived


async def get_media_payload(
    db: AsyncSession,
    bookmark_id: str,
    media_id: int,
) -> Media:
    """
    Load one media item including its payload.

    Raises:
        MediaNotFoundError: If the item doesn't exist or was imported without a payload.
    """
    result = await db.execute(
        select(Media)
        .options(undefer(Media.file_data))
        .where(Media.id == media_id, Media.bookmark_id == bookmark_id),
    )
    media = result.scalar_one_or_none()
    if media is None or media.file_data is None:
        raise MediaNotFoundError(bookmark_id, media_id)
    return media


async def get_statistics(db: AsyncSession) -> BookmarkStatistics:
    """Bookmark and tag totals plus the most used tags among active bookmarks."""
    counts = await db.execute(
        select(
            func.count().label("total"),
            func.count().filter(Bookmark.archived.is_(False)).label("active"),
            func.count().filter(Bookmark.archived.is_(True)).label("archived"),
        ).select_from(Bookmark),
    )
    row = counts.one()

    total_tags = (await db.execute(select(func.count()).select_from(Tag))).scalar_one()

    top = await db.execute(
        select(Tag.name, func.count(BookmarkTag.bookmark_id).label("count"))
        .join(BookmarkTag, BookmarkTag.tag_id == Tag.id)
        .join(Bookmark, Bookmark.id == BookmarkTag.bookmark_id)
        .where(Bookmark.archived.is_(False))
        .group_by(Tag.id, Tag.name)
        .order_by(func.count(BookmarkTag.bookmark_id).desc(), Tag.name.asc())
        .limit(TOP_TAGS_LIMIT),
    )

    return BookmarkStatistics(
        total_bookmarks=row.total,
        active_bookmarks=row.active,
        archived_bookmarks=row.archived,
        total_tags=total_tags,
        top_tags=[(r.name, r.count) for r in top],
    )

"""Service layer for tag operations."""
import logging

from sqlalchemy import func, select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from models.bookmark import Bookmark
from models.tag import STANDARD_TAG_NAMES, BookmarkTag, Tag
from services.exceptions import BookmarkNotFoundError

logger = logging.getLogger(__name__)


class TagNotFoundError(Exception):
    """Raised when a tag is not found."""

    def __init__(self, tag_ref: int | str) -> None:
        self.tag_ref = tag_ref
        super().__init__(f"Tag '{tag_ref}' not found")


class TagAlreadyExistsError(Exception):
    """Raised when trying to rename a tag to a name that already exists."""

    def __init__(self, tag_name: str) -> None:
        self.tag_name = tag_name
        super().__init__(f"Tag '{tag_name}' already exists")


class StandardTagProtectedError(Exception):
    """Raised when trying to rename or delete one of the standard tags."""

    def __init__(self, tag_name: str) -> None:
        self.tag_name = tag_name
        super().__init__(f"Tag '{tag_name}' is a standard tag and cannot be changed")


def normalize_tag_names(tag_names: list[str]) -> list[str]:
    """
    Trim tag names, drop empty ones and duplicates, keeping first-seen order.

    Names are case-sensitive ("To do" and "to do" are different tags).
    """
    seen: set[str] = set()
    normalized = []
    for raw in tag_names:
        name = raw.strip()
        if not name or name in seen:
            continue
        seen.add(name)
        normalized.append(name)
    return normalized


async def ensure_standard_tags(db: AsyncSession) -> None:
    """
    Create the standard tags if they don't exist yet.

    Safe to call concurrently from several processes at startup.
    """
    await db.execute(
        insert(Tag)
        .values([{"name": name} for name in STANDARD_TAG_NAMES])
        .on_conflict_do_nothing(index_elements=[Tag.name]),
    )
    await db.flush()


async def get_or_create_tags(db: AsyncSession, tag_names: list[str]) -> list[Tag]:
    """
    Get existing tags or create new ones.

    Args:
        db: Database session.
        tag_names: List of tag names to get or create.

    Returns:
        List of Tag objects (existing or newly created), in the order given.
    """
    normalized = normalize_tag_names(tag_names)
    if not normalized:
        return []

    result = await db.execute(select(Tag).where(Tag.name.in_(normalized)))
    existing_tags = {tag.name: tag for tag in result.scalars()}

    tags = []
    for name in normalized:
        if name in existing_tags:
            tags.append(existing_tags[name])
        else:
            new_tag = Tag(name=name)
            db.add(new_tag)
            tags.append(new_tag)

    await db.flush()
    return tags


async def list_tags(db: AsyncSession) -> list[Tag]:
    """All tags, standard ones first, then by name."""
    result = await db.execute(select(Tag).order_by(Tag.name.asc()))
    tags = list(result.scalars())
    return sorted(tags, key=lambda tag: not tag.is_standard)


async def get_tag(db: AsyncSession, tag_id: int) -> Tag:
    """
    Get a tag by ID.

    Raises:
        TagNotFoundError: If the tag doesn't exist.
    """
    tag = await db.get(Tag, tag_id)
    if tag is None:
        raise TagNotFoundError(tag_id)
    return tag


async def rename_tag(db: AsyncSession, tag_id: int, new_name: str) -> Tag:
    """
    Rename a tag.

    Args:
        db: Database session.
        tag_id: ID of the tag to rename.
        new_name: New name for the tag.

    Returns:
        The updated Tag object.

    Raises:
        TagNotFoundError: If the tag doesn't exist.
        StandardTagProtectedError: If the tag is a standard tag.
        TagAlreadyExistsError: If a tag with the new name already exists.
    """
    tag = await get_tag(db, tag_id)
    if tag.is_standard:
        raise StandardTagProtectedError(tag.name)

    new_name = new_name.strip()
    if new_name == tag.name:
        return tag

    existing = await db.execute(select(Tag.id).where(Tag.name == new_name))
    if existing.scalar_one_or_none() is not None:
        raise TagAlreadyExistsError(new_name)

    tag.name = new_name
    try:
        await db.flush()
    except IntegrityError as e:
        await db.rollback()
        # Another request created the name between the check and the flush
        raise TagAlreadyExistsError(new_name) from e
    await db.refresh(tag)
    return tag


async def delete_tag(db: AsyncSession, tag_id: int) -> None:
    """
    Delete a tag. Bookmark links cascade in the database.

    Raises:
        TagNotFoundError: If the tag doesn't exist.
        StandardTagProtectedError: If the tag is a standard tag.
    """
    tag = await get_tag(db, tag_id)
    if tag.is_standard:
        raise StandardTagProtectedError(tag.name)
    logger.info("Deleting tag %s (id=%d)", tag.name, tag_id)
    await db.delete(tag)
    await db.flush()


async def count_tag_bookmarks(db: AsyncSession, tag_id: int) -> int:
    """Number of bookmarks (archived or not) carrying the tag."""
    await get_tag(db, tag_id)
    result = await db.execute(
        select(func.count())
        .select_from(BookmarkTag)
        .where(BookmarkTag.tag_id == tag_id),
    )
    return result.scalar_one()


async def _get_bookmark_with_links(db: AsyncSession, bookmark_id: str) -> Bookmark:
    result = await db.execute(
        select(Bookmark)
        .options(selectinload(Bookmark.tag_links))
        .where(Bookmark.id == bookmark_id)
        .execution_options(populate_existing=True),
    )
    bookmark = result.scalar_one_or_none()
    if bookmark is None:
        raise BookmarkNotFoundError(bookmark_id)
    return bookmark


async def update_bookmark_tags(
    db: AsyncSession,
    bookmark_id: str,
    tag_names: list[str],
) -> Bookmark:
    """
    Replace a bookmark's tag set.

    Links for tags that stay on the bookmark are kept as they are, so their
    ``completed`` flag survives. Links for removed tags are deleted, and newly
    added tags start out not completed (a removed tag's flag is never carried over
    to a different tag).

    Raises:
        BookmarkNotFoundError: If the bookmark doesn't exist.
    """
    bookmark = await _get_bookmark_with_links(db, bookmark_id)
    existing_links = {link.tag.name: link for link in bookmark.tag_links}

    tags = await get_or_create_tags(db, tag_names)
    bookmark.tag_links = [
        existing_links.get(tag.name) or BookmarkTag(tag=tag, completed=False)
        for tag in tags
    ]
    await db.flush()
    return bookmark


async def set_tag_completed(
    db: AsyncSession,
    bookmark_id: str,
    tag_name: str,
    completed: bool,
) -> BookmarkTag:
    """
    Mark a bookmark's tag as completed (or not).

    Raises:
        BookmarkNotFoundError: If the bookmark doesn't exist.
        TagNotFoundError: If the bookmark doesn't carry the tag.
    """
    bookmark = await _get_bookmark_with_links(db, bookmark_id)
    for link in bookmark.tag_links:
        if link.tag.name == tag_name:
            link.completed = completed
            await db.flush()
            return link
    raise TagNotFoundError(tag_name)

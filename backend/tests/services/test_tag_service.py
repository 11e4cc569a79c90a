"""Tests for tag service layer functionality."""
import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from models.tag import STANDARD_TAG_NAMES, BookmarkTag, Tag
from services.exceptions import BookmarkNotFoundError
from services.tag_service import (
    StandardTagProtectedError,
    TagAlreadyExistsError,
    TagNotFoundError,
    count_tag_bookmarks,
    delete_tag,
    ensure_standard_tags,
    get_or_create_tags,
    list_tags,
    normalize_tag_names,
    rename_tag,
    set_tag_completed,
    update_bookmark_tags,
)
from tests.factories import POST_ID_2020, POST_ID_2022, create_bookmark


async def links_of(db: AsyncSession, bookmark_id: str) -> dict[str, bool]:
    result = await db.execute(
        select(Tag.name, BookmarkTag.completed)
        .join(BookmarkTag, BookmarkTag.tag_id == Tag.id)
        .where(BookmarkTag.bookmark_id == bookmark_id),
    )
    return {row.name: row.completed for row in result}


# =============================================================================
# normalize_tag_names
# =============================================================================


def test__normalize_tag_names__trims_and_dedupes() -> None:
    assert normalize_tag_names([" python ", "python", "", "  ", "rust"]) == ["python", "rust"]


def test__normalize_tag_names__case_sensitive() -> None:
    assert normalize_tag_names(["To do", "to do"]) == ["To do", "to do"]


# =============================================================================
# Standard tags
# =============================================================================


async def test__ensure_standard_tags__idempotent(db_session: AsyncSession) -> None:
    await ensure_standard_tags(db_session)
    await ensure_standard_tags(db_session)

    names = (await db_session.execute(select(Tag.name).order_by(Tag.name))).scalars().all()
    assert sorted(names) == sorted(STANDARD_TAG_NAMES)


async def test__list_tags__standard_first(db_session: AsyncSession) -> None:
    await get_or_create_tags(db_session, ["aardvark", "zebra"])
    await ensure_standard_tags(db_session)

    names = [tag.name for tag in await list_tags(db_session)]
    assert names == ["To do", "To read", "aardvark", "zebra"]


async def test__rename_tag__standard_tag_protected(db_session: AsyncSession) -> None:
    await ensure_standard_tags(db_session)
    to_do = (await db_session.execute(select(Tag).where(Tag.name == "To do"))).scalar_one()

    with pytest.raises(StandardTagProtectedError):
        await rename_tag(db_session, to_do.id, "Later")


async def test__delete_tag__standard_tag_protected(db_session: AsyncSession) -> None:
    await ensure_standard_tags(db_session)
    to_read = (await db_session.execute(select(Tag).where(Tag.name == "To read"))).scalar_one()

    with pytest.raises(StandardTagProtectedError):
        await delete_tag(db_session, to_read.id)


# =============================================================================
# Tag CRUD
# =============================================================================


async def test__get_or_create_tags__reuses_existing(db_session: AsyncSession) -> None:
    first = await get_or_create_tags(db_session, ["python"])
    second = await get_or_create_tags(db_session, ["python", "rust"])

    assert second[0].id == first[0].id
    assert [tag.name for tag in second] == ["python", "rust"]
    count = (await db_session.execute(select(func.count()).select_from(Tag))).scalar_one()
    assert count == 2


async def test__get_or_create_tags__empty(db_session: AsyncSession) -> None:
    assert await get_or_create_tags(db_session, ["", " "]) == []


async def test__rename_tag(db_session: AsyncSession) -> None:
    [tag] = await get_or_create_tags(db_session, ["pyhton"])

    renamed = await rename_tag(db_session, tag.id, " python ")

    assert renamed.id == tag.id
    assert renamed.name == "python"


async def test__rename_tag__same_name_is_noop(db_session: AsyncSession) -> None:
    [tag] = await get_or_create_tags(db_session, ["python"])
    assert (await rename_tag(db_session, tag.id, "python")).name == "python"


async def test__rename_tag__duplicate(db_session: AsyncSession) -> None:
    tag, _ = await get_or_create_tags(db_session, ["python", "rust"])

    with pytest.raises(TagAlreadyExistsError):
        await rename_tag(db_session, tag.id, "rust")


async def test__rename_tag__not_found(db_session: AsyncSession) -> None:
    with pytest.raises(TagNotFoundError):
        await rename_tag(db_session, 999999, "anything")


async def test__delete_tag__removes_links(db_session: AsyncSession) -> None:
    await create_bookmark(db_session, POST_ID_2020)
    await update_bookmark_tags(db_session, POST_ID_2020, ["python", "rust"])
    python = (await db_session.execute(select(Tag).where(Tag.name == "python"))).scalar_one()

    await delete_tag(db_session, python.id)

    assert await links_of(db_session, POST_ID_2020) == {"rust": False}
    with pytest.raises(TagNotFoundError):
        await delete_tag(db_session, python.id)


async def test__count_tag_bookmarks(db_session: AsyncSession) -> None:
    await create_bookmark(db_session, POST_ID_2020)
    await create_bookmark(db_session, POST_ID_2022, archived=True)
    await update_bookmark_tags(db_session, POST_ID_2020, ["python"])
    await update_bookmark_tags(db_session, POST_ID_2022, ["python", "rust"])
    python = (await db_session.execute(select(Tag).where(Tag.name == "python"))).scalar_one()

    assert await count_tag_bookmarks(db_session, python.id) == 2


# =============================================================================
# Bookmark tag links
# =============================================================================


async def test__update_bookmark_tags__preserves_completed_of_kept_tags(
    db_session: AsyncSession,
) -> None:
    """Going from {A, B} to {A, C} keeps A's flag and starts C as not completed."""
    await create_bookmark(db_session, POST_ID_2020)
    await update_bookmark_tags(db_session, POST_ID_2020, ["A", "B"])
    await set_tag_completed(db_session, POST_ID_2020, "A", True)
    await set_tag_completed(db_session, POST_ID_2020, "B", True)

    await update_bookmark_tags(db_session, POST_ID_2020, ["A", "C"])

    assert await links_of(db_session, POST_ID_2020) == {"A": True, "C": False}


async def test__update_bookmark_tags__clear(db_session: AsyncSession) -> None:
    await create_bookmark(db_session, POST_ID_2020)
    await update_bookmark_tags(db_session, POST_ID_2020, ["A", "B"])

    bookmark = await update_bookmark_tags(db_session, POST_ID_2020, [])

    assert bookmark.tag_links == []
    assert await links_of(db_session, POST_ID_2020) == {}
    # Tags themselves outlive their links
    count = (await db_session.execute(select(func.count()).select_from(Tag))).scalar_one()
    assert count == 2


async def test__update_bookmark_tags__not_found(db_session: AsyncSession) -> None:
    with pytest.raises(BookmarkNotFoundError):
        await update_bookmark_tags(db_session, "missing", ["A"])


async def test__set_tag_completed__toggles(db_session: AsyncSession) -> None:
    await create_bookmark(db_session, POST_ID_2020)
    await update_bookmark_tags(db_session, POST_ID_2020, ["To do"])

    link = await set_tag_completed(db_session, POST_ID_2020, "To do", True)
    assert link.completed is True
    await set_tag_completed(db_session, POST_ID_2020, "To do", False)

    assert await links_of(db_session, POST_ID_2020) == {"To do": False}


async def test__set_tag_completed__tag_not_on_bookmark(db_session: AsyncSession) -> None:
    await create_bookmark(db_session, POST_ID_2020)
    await update_bookmark_tags(db_session, POST_ID_2020, ["A"])

    with pytest.raises(TagNotFoundError):
        await set_tag_completed(db_session, POST_ID_2020, "B", True)

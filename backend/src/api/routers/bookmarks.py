"""Bookmark endpoints."""
import mimetypes

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_async_session
from schemas.bookmark import (
    ArchiveToggleResponse,
    BookmarkListItem,
    BookmarkListResponse,
    BookmarkResponse,
    BookmarkTagCompletionUpdate,
    BookmarkTagsUpdate,
    TagWithStatus,
)
from services import bookmark_service, bookmark_view_service, tag_service
from services.bookmark_service import MediaNotFoundError
from services.exceptions import BookmarkNotFoundError
from services.tag_service import TagNotFoundError
from services.utils import page_to_offset

router = APIRouter(prefix="/bookmarks", tags=["bookmarks"])


def _not_found(e: Exception) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.get("", response_model=BookmarkListResponse)
async def list_bookmarks(
    tag: str | None = Query(default=None, description="Only bookmarks carrying this tag"),
    search: str | None = Query(default=None, description="Search text, author name and handle"),
    page: int = Query(default=1, ge=1, description="1-based page number"),
    limit: int = Query(default=12, ge=1, le=100, description="Page size"),
    archived: bool = Query(default=False, description="List archived bookmarks instead"),
    db: AsyncSession = Depends(get_async_session),
) -> BookmarkListResponse:
    """
    List bookmarks, newest first.

    Served from the bookmark_views projection, so results can lag recent imports
    and edits by up to one refresh interval.
    """
    rows, total = await bookmark_view_service.list_bookmarks_from_view(
        db,
        tag=tag,
        search=search,
        archived=archived,
        offset=page_to_offset(page, limit),
        limit=limit,
    )
    return BookmarkListResponse(
        bookmarks=[BookmarkListItem.model_validate(row) for row in rows],
        total=total,
    )


@router.get("/{bookmark_id}", response_model=BookmarkResponse)
async def get_bookmark(
    bookmark_id: str,
    db: AsyncSession = Depends(get_async_session),
) -> BookmarkResponse:
    """Get a single bookmark with its media and tags."""
    try:
        bookmark = await bookmark_service.get_bookmark(db, bookmark_id)
    except BookmarkNotFoundError as e:
        raise _not_found(e) from e
    return BookmarkResponse.model_validate(bookmark)


@router.put("/{bookmark_id}", response_model=BookmarkResponse)
async def update_bookmark_tags(
    bookmark_id: str,
    data: BookmarkTagsUpdate,
    db: AsyncSession = Depends(get_async_session),
) -> BookmarkResponse:
    """
    Replace a bookmark's tags.

    Tags that stay on the bookmark keep their completed flag.
    """
    try:
        await tag_service.update_bookmark_tags(db, bookmark_id, data.tags)
        bookmark = await bookmark_service.get_bookmark(db, bookmark_id)
    except BookmarkNotFoundError as e:
        raise _not_found(e) from e
    return BookmarkResponse.model_validate(bookmark)


@router.patch("/{bookmark_id}/tags/{tag_name}", response_model=TagWithStatus)
async def set_tag_completed(
    bookmark_id: str,
    tag_name: str,
    data: BookmarkTagCompletionUpdate,
    db: AsyncSession = Depends(get_async_session),
) -> TagWithStatus:
    """Mark one of a bookmark's tags as completed or not completed."""
    try:
        link = await tag_service.set_tag_completed(db, bookmark_id, tag_name, data.completed)
    except (BookmarkNotFoundError, TagNotFoundError) as e:
        raise _not_found(e) from e
    return TagWithStatus(id=link.tag.id, name=link.tag.name, completed=link.completed)


@router.patch("/{bookmark_id}/archive", response_model=ArchiveToggleResponse)
async def toggle_archive(
    bookmark_id: str,
    db: AsyncSession = Depends(get_async_session),
) -> ArchiveToggleResponse:
    """Archive an active bookmark, or restore an archived one."""
    try:
        archived = await bookmark_service.toggle_archive(db, bookmark_id)
    except BookmarkNotFoundError as e:
        raise _not_found(e) from e
    return ArchiveToggleResponse(id=bookmark_id, archived=archived)


@router.delete("/{bookmark_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_bookmark(
    bookmark_id: str,
    db: AsyncSession = Depends(get_async_session),
) -> None:
    """Delete a bookmark with its media and tag links."""
    try:
        await bookmark_service.delete_bookmark(db, bookmark_id)
    except BookmarkNotFoundError as e:
        raise _not_found(e) from e


@router.get("/{bookmark_id}/media/{media_id}")
async def get_media_file(
    bookmark_id: str,
    media_id: int,
    db: AsyncSession = Depends(get_async_session),
) -> Response:
    """
    Download a media item's stored payload.

    Returns 404 if the item doesn't exist or its file was missing from the
    imported archive.
    """
    try:
        media = await bookmark_service.get_media_payload(db, bookmark_id, media_id)
    except MediaNotFoundError as e:
        raise _not_found(e) from e
    content_type, _ = mimetypes.guess_type(media.file_name or "")
    return Response(
        content=media.file_data,
        media_type=content_type or "application/octet-stream",
        headers={"Content-Disposition": f'inline; filename="{media.file_name}"'},
    )

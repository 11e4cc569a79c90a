"""Tag management endpoints."""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_async_session
from schemas.tag import TagBookmarkCount, TagRenameRequest, TagResponse
from services.tag_service import (
    StandardTagProtectedError,
    TagAlreadyExistsError,
    TagNotFoundError,
    count_tag_bookmarks,
    delete_tag,
    list_tags,
    rename_tag,
)

router = APIRouter(prefix="/tags", tags=["tags"])


@router.get("", response_model=list[TagResponse])
async def list_tags_endpoint(
    db: AsyncSession = Depends(get_async_session),
) -> list[TagResponse]:
    """Get all tags, standard tags first."""
    tags = await list_tags(db)
    return [TagResponse.model_validate(tag) for tag in tags]


@router.patch("/{tag_id}", response_model=TagResponse)
async def rename_tag_endpoint(
    tag_id: int,
    rename_request: TagRenameRequest,
    db: AsyncSession = Depends(get_async_session),
) -> TagResponse:
    """
    Rename a tag.

    Returns 404 if the tag doesn't exist, 403 for the standard tags, and 409 if
    a tag with the new name already exists.
    """
    try:
        tag = await rename_tag(db, tag_id, rename_request.name)
    except TagNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    except StandardTagProtectedError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e)) from e
    except TagAlreadyExistsError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e
    return TagResponse.model_validate(tag)


@router.delete("/{tag_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_tag_endpoint(
    tag_id: int,
    db: AsyncSession = Depends(get_async_session),
) -> None:
    """
    Delete a tag and remove it from every bookmark.

    Returns 404 if the tag doesn't exist and 403 for the standard tags.
    """
    try:
        await delete_tag(db, tag_id)
    except TagNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    except StandardTagProtectedError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e)) from e


@router.get("/{tag_id}/count", response_model=TagBookmarkCount)
async def tag_bookmark_count(
    tag_id: int,
    db: AsyncSession = Depends(get_async_session),
) -> TagBookmarkCount:
    """Number of bookmarks carrying the tag."""
    try:
        count = await count_tag_bookmarks(db, tag_id)
    except TagNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    return TagBookmarkCount(count=count)

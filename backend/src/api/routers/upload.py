"""Bookmark export upload endpoint."""
import logging

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_async_session, get_settings
from core.config import Settings
from schemas.upload import UploadResponse
from services.exceptions import ImportFailedError, ManifestDecodeError
from services.import_service import import_export

logger = logging.getLogger(__name__)

router = APIRouter(tags=["upload"])


@router.post("/upload", response_model=UploadResponse)
async def upload_export(
    json_file: UploadFile | None = File(default=None, alias="jsonFile"),
    zip_file: UploadFile | None = File(default=None, alias="zipFile"),
    db: AsyncSession = Depends(get_async_session),
    settings: Settings = Depends(get_settings),
) -> UploadResponse:
    """
    Import a bookmark export: a JSON manifest plus a ZIP of its media files.

    The import is all-or-nothing for bookmarks. Media files missing from the ZIP
    don't fail it; their media entries are stored without a payload.

    Returns 400 if a file is missing or the manifest is invalid, 413 if the
    manifest is too large, and 500 if the import was rolled back.
    """
    if json_file is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No JSON file provided")
    if zip_file is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No ZIP file provided")

    manifest = await json_file.read(settings.max_manifest_size_bytes + 1)
    if len(manifest) > settings.max_manifest_size_bytes:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"JSON file exceeds {settings.max_manifest_size_bytes:,} bytes",
        )

    try:
        # The archive stays in Starlette's spooled temp file; MediaArchive opens it once
        result = await import_export(db, manifest, zip_file.file)
    except ManifestDecodeError as e:
        logger.warning("Rejected upload %s: %s", json_file.filename, e)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    except ImportFailedError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e),
        ) from e

    return UploadResponse(
        message="Upload processed successfully",
        count=result.records_processed,
        media_created=result.media_created,
        media_missing=result.media_missing,
        timestamps_defaulted=result.timestamps_defaulted,
    )

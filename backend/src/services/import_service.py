"""
Import of a bookmark export (manifest + media archive) into the database.

The whole import runs in one transaction. Records are processed strictly in
manifest order, so when the same ID appears twice the last occurrence wins.

Failure policy:
- Anything that prevents a record from being written rolls back the entire
  batch, including records processed before it.
- A media payload that can't be found or read is logged and the media row is
  stored without it. The batch carries on.
- An unparseable timestamp is logged and replaced with the current time.
"""
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import BinaryIO

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from models.bookmark import Bookmark
from models.media import Media
from schemas.manifest import ImportRecord, MediaRef
from services.exceptions import (
    ImportFailedError,
    InvalidMediaReferenceError,
    MediaExtractionError,
)
from services.manifest_parser import parse_manifest
from services.media_archive import MediaArchive
from services.media_filename import derive_media_filename
from services.time_normalizer import parse_timestamp, try_parse_timestamp

logger = logging.getLogger(__name__)

# Bookmark columns overwritten from the manifest on every import. Everything else
# on the row (archived flag, tag links) belongs to the user and is left alone.
BOOKMARK_IMPORT_FIELDS: tuple[str, ...] = (
    "full_text",
    "screen_name",
    "name",
    "profile_image_url",
    "in_reply_to",
    "retweeted_status",
    "quoted_status",
    "favorite_count",
    "retweet_count",
    "bookmark_count",
    "quote_count",
    "reply_count",
    "views_count",
    "favorited",
    "retweeted",
    "bookmarked",
    "url",
)


@dataclass
class ImportResult:
    """Outcome of a committed import."""

    records_processed: int = 0
    media_created: int = 0
    media_missing: int = 0
    timestamps_defaulted: int = 0

    def to_dict(self) -> dict[str, int]:
        """Convert to simple dict for logging/return."""
        return {
            "records_processed": self.records_processed,
            "media_created": self.media_created,
            "media_missing": self.media_missing,
            "timestamps_defaulted": self.timestamps_defaulted,
        }


async def import_export(
    db: AsyncSession,
    manifest: bytes | str,
    archive: bytes | BinaryIO,
    now: datetime | None = None,
) -> ImportResult:
    """
    Parse a manifest and import it together with its media archive.

    Raises:
        ManifestDecodeError: If the manifest can't be decoded. Nothing is written.
        ImportFailedError: If any record fails to persist. Nothing is committed.
    """
    records = parse_manifest(manifest)
    with MediaArchive(archive) as media_archive:
        return await import_bookmarks(db, records, media_archive, now=now)


async def import_bookmarks(
    db: AsyncSession,
    records: Sequence[ImportRecord],
    archive: MediaArchive,
    now: datetime | None = None,
) -> ImportResult:
    """
    Upsert records and their media in a single transaction.

    Commits on success. On failure the session is rolled back, so none of the
    batch's bookmarks, media or tag links persist.

    Args:
        db: Database session; the import owns its transaction.
        records: Records in manifest order.
        archive: Opened media archive to pull payloads from.
        now: Fallback for unparseable timestamps. Defaults to datetime.now(UTC).

    Returns:
        ImportResult with the number of records processed.

    Raises:
        ImportFailedError: Wrapping the error that aborted the batch.
    """
    result = ImportResult()
    logger.info("Starting import of %d records", len(records))

    for index, record in enumerate(records):
        try:
            await _import_record(db, record, archive, result, now)
        except Exception as e:
            await db.rollback()
            logger.exception("Error processing bookmark %d (id=%s)", index, record.id)
            raise ImportFailedError(index, record.id, str(e)) from e
        result.records_processed += 1

    try:
        await db.commit()
    except Exception as e:
        await db.rollback()
        logger.exception("Error committing import transaction")
        raise ImportFailedError(len(records), "", f"commit failed: {e}") from e

    logger.info("Import complete: %s", result.to_dict())
    return result


async def _import_record(
    db: AsyncSession,
    record: ImportRecord,
    archive: MediaArchive,
    result: ImportResult,
    now: datetime | None,
) -> None:
    """Read-or-create one bookmark, overwrite its fields and recreate its media."""
    created_at = try_parse_timestamp(record.created_at)
    if created_at is None:
        result.timestamps_defaulted += 1
        created_at = parse_timestamp(record.created_at, now=now)

    # populate_existing so the media collection is loaded even when the bookmark
    # is already in the identity map (e.g. a duplicate ID earlier in this batch)
    bookmark = await db.get(
        Bookmark,
        record.id,
        options=[selectinload(Bookmark.media)],
        populate_existing=True,
    )
    if bookmark is None:
        bookmark = Bookmark(id=record.id)
        db.add(bookmark)

    bookmark.created_at = created_at
    for field_name in BOOKMARK_IMPORT_FIELDS:
        setattr(bookmark, field_name, getattr(record, field_name))
    bookmark.tweet_metadata = record.metadata

    # Media is never diffed: the old rows are orphaned (and deleted) and the
    # manifest's list is stored afresh.
    bookmark.media = [
        _build_media(record, position, media_ref, archive, result)
        for position, media_ref in enumerate(record.media, start=1)
    ]
    await db.flush()


def _build_media(
    record: ImportRecord,
    position: int,
    media_ref: MediaRef,
    archive: MediaArchive,
    result: ImportResult,
) -> Media:
    """Create a media row, attaching the archive payload when it can be found."""
    media = Media(
        type=media_ref.type,
        url=media_ref.url,
        thumbnail=media_ref.thumbnail,
        original=media_ref.original,
    )
    result.media_created += 1

    try:
        file_name = derive_media_filename(
            record.screen_name, record.id, media_ref.type, position,
        )
    except InvalidMediaReferenceError as e:
        logger.warning(
            "Could not derive media file name for bookmark %s item %d: %s",
            record.id, position, e,
        )
        result.media_missing += 1
        return media

    media.file_name = file_name
    try:
        payload = archive.extract(file_name)
    except MediaExtractionError as e:
        logger.warning("Could not extract media file %s: %s", file_name, e)
        result.media_missing += 1
        return media

    media.file_data = payload
    media.file_size = len(payload)
    return media

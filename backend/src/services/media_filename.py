"""
Derivation of archive entry names for media items.

The export tool names each media file after the post it belongs to:

    {screen_name}_{post_id}_{type}_{position}_{YYYYMMDD}{extension}

where the date is the post's creation day recovered from the snowflake ID and
the position is 1-based within the post's media list.
"""
from datetime import UTC, date, datetime

from schemas.manifest import MediaKind
from services.exceptions import InvalidMediaReferenceError

# Milliseconds between the Unix epoch and the snowflake epoch (2010-11-04T01:42:54.657Z)
SNOWFLAKE_EPOCH_MS = 1288834974657
SNOWFLAKE_TIMESTAMP_SHIFT = 22


def snowflake_timestamp(external_id: str) -> datetime:
    """
    Recover the creation instant encoded in a snowflake ID.

    Raises:
        InvalidMediaReferenceError: If the ID is not an ASCII decimal integer, or is
            too large to encode a representable date.
    """
    # ASCII 0-9 only; isdigit() also accepts characters like "²"
    if not (external_id.isascii() and external_id.isdecimal()):
        raise InvalidMediaReferenceError(
            f"ID {external_id!r} is not a snowflake ID (expected decimal digits)",
        )
    timestamp_ms = (int(external_id) >> SNOWFLAKE_TIMESTAMP_SHIFT) + SNOWFLAKE_EPOCH_MS
    try:
        return datetime.fromtimestamp(timestamp_ms / 1000, tz=UTC)
    except (ValueError, OverflowError, OSError) as e:
        raise InvalidMediaReferenceError(
            f"ID {external_id!r} encodes no representable timestamp: {e}",
        ) from e


def snowflake_date(external_id: str) -> date:
    """UTC calendar day of a snowflake ID's creation instant."""
    return snowflake_timestamp(external_id).date()


def media_extension(kind: MediaKind) -> str:
    """File extension the export uses for a media kind."""
    match kind:
        case MediaKind.VIDEO:
            return ".mp4"
        case MediaKind.PHOTO:
            return ".jpg"
        case MediaKind.OTHER:
            return ""


def derive_media_filename(
    screen_name: str,
    external_id: str,
    media_type: str,
    position: int,
) -> str:
    """
    Build the archive entry name for one media item.

    Args:
        screen_name: Author handle of the post.
        external_id: Snowflake ID of the post.
        media_type: Raw media type label from the manifest; it appears verbatim in
            the name, and selects the extension via MediaKind.
        position: 1-based index of the item within the post's media list.

    Returns:
        The expected entry name, e.g. ``alice_1234567890123456789_photo_1_20200302.jpg``.

    Raises:
        InvalidMediaReferenceError: If the ID is not numeric or position < 1.
    """
    if position < 1:
        raise InvalidMediaReferenceError(f"Media position must be >= 1, got {position}")
    day = snowflake_date(external_id).strftime("%Y%m%d")
    extension = media_extension(MediaKind.from_label(media_type))
    return f"{screen_name}_{external_id}_{media_type}_{position}_{day}{extension}"

"""Decoding of the bookmark export manifest."""
import logging

from pydantic import TypeAdapter, ValidationError

from schemas.manifest import ImportRecord
from services.exceptions import ManifestDecodeError

logger = logging.getLogger(__name__)

_manifest_adapter = TypeAdapter(list[ImportRecord])


def parse_manifest(payload: bytes | str) -> list[ImportRecord]:
    """
    Decode a manifest into import records, preserving manifest order.

    The whole manifest must decode: there is no partial recovery, since a
    truncated or malformed export can't be trusted record by record.

    Raises:
        ManifestDecodeError: If the payload is not a JSON array of records.
    """
    try:
        records = _manifest_adapter.validate_json(payload)
    except ValidationError as e:
        logger.info("Rejected manifest: %d validation error(s)", e.error_count())
        raise ManifestDecodeError(_summarize(e)) from e
    logger.debug("Parsed manifest with %d records", len(records))
    return records


def _summarize(error: ValidationError) -> str:
    """First validation error as a short, location-prefixed message."""
    first = error.errors(include_url=False)[0]
    location = ".".join(str(part) for part in first["loc"])
    message = first["msg"]
    if error.error_count() > 1:
        message = f"{message} (and {error.error_count() - 1} more)"
    return f"{location}: {message}" if location else message

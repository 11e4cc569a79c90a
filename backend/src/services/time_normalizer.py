"""Parsing of the timestamp formats found in bookmark exports."""
import logging
from datetime import UTC, datetime

logger = logging.getLogger(__name__)

# Tried in order; the first format that parses wins. %z accepts "+0000", "+00:00"
# and "Z", so these also take "2024-01-15 10:30:00 +00:00", "...10:30:00+00:00"
# and "...10:30:00Z", all read as the instant they describe.
TIMESTAMP_FORMATS: tuple[str, ...] = (
    "%Y-%m-%d %H:%M:%S %z",  # 2024-01-15 10:30:00 +0000
    "%Y-%m-%d %H:%M:%S%z",  # 2024-01-15 10:30:00+0000
    "%Y-%m-%d %H:%M:%S",  # 2024-01-15 10:30:00, assumed UTC
)


def try_parse_timestamp(value: str) -> datetime | None:
    """
    Parse an export timestamp into a timezone-aware datetime.

    Returns None if no supported format matches.
    """
    candidate = value.strip()
    for fmt in TIMESTAMP_FORMATS:
        try:
            parsed = datetime.strptime(candidate, fmt)
        except ValueError:
            continue
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=UTC)
        return parsed
    return None


def parse_timestamp(value: str, now: datetime | None = None) -> datetime:
    """
    Parse an export timestamp, falling back to the current time.

    An unparseable value does not fail the import: the warning is logged and the
    record is stored with ``now`` as its creation time. That timestamp is wrong,
    which is accepted in exchange for not dropping the record.

    Args:
        value: Raw ``created_at`` string from the manifest.
        now: Fallback instant. Defaults to datetime.now(UTC).

    Returns:
        The parsed instant, or the fallback.
    """
    parsed = try_parse_timestamp(value)
    if parsed is not None:
        return parsed
    fallback = now if now is not None else datetime.now(UTC)
    logger.warning(
        "Error parsing time %r, using current time %s instead",
        value,
        fallback.isoformat(),
    )
    return fallback

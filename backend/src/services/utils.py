"""Shared utility functions for service layer."""


def escape_ilike(value: str) -> str:
    r"""
    Escape special ILIKE characters so user search text matches literally.

    PostgreSQL LIKE/ILIKE treats ``%``, ``_`` and the ``\\`` escape character
    specially.
    """
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def page_to_offset(page: int, limit: int) -> int:
    """Convert a 1-based page number into a row offset (pages below 1 clamp to 1)."""
    return (max(page, 1) - 1) * limit

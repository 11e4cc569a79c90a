"""SQLAlchemy models."""
from models.base import Base, TimestampMixin, ViewBase
from models.tag import STANDARD_TAG_NAMES, BookmarkTag, Tag  # Must be before bookmark due to import
from models.media import Media
from models.bookmark import Bookmark
from models.bookmark_view import BookmarkView

__all__ = [
    "STANDARD_TAG_NAMES",
    "Base",
    "Bookmark",
    "BookmarkTag",
    "BookmarkView",
    "Media",
    "Tag",
    "TimestampMixin",
    "ViewBase",
]

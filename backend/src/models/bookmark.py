"""Bookmark model for storing imported bookmarked posts."""
from datetime import datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import Boolean, DateTime, Index, Integer, String, Text, false, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from models.base import Base

if TYPE_CHECKING:
    from models.media import Media
    from models.tag import BookmarkTag, Tag


class Bookmark(Base):
    """
    Bookmark model - one row per bookmarked post, keyed by the platform's post ID.

    ``created_at`` is the post's creation instant parsed from the export, not the
    row's insertion time. ``archived`` and the tag links are user state and are
    never written by the importer.
    """

    __tablename__ = "bookmarks"
    __table_args__ = (
        Index("ix_bookmarks_archived_created_at", "archived", "created_at"),
    )

    id: Mapped[str] = mapped_column(String(30), primary_key=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    full_text: Mapped[str] = mapped_column(Text, nullable=False, default="")
    screen_name: Mapped[str] = mapped_column(String(50), nullable=False, default="")
    name: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    profile_image_url: Mapped[str] = mapped_column(Text, nullable=False, default="")
    in_reply_to: Mapped[str | None] = mapped_column(String(30), nullable=True)
    retweeted_status: Mapped[str | None] = mapped_column(String(30), nullable=True)
    quoted_status: Mapped[str | None] = mapped_column(String(30), nullable=True)

    favorite_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    retweet_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    bookmark_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    quote_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    reply_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    views_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    favorited: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    retweeted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    bookmarked: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    url: Mapped[str] = mapped_column(Text, nullable=False, default="")
    # "metadata" is reserved on declarative classes, so the attribute is renamed
    tweet_metadata: Mapped[Any | None] = mapped_column("metadata", JSONB, nullable=True)

    archived: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.clock_timestamp(),
        onupdate=func.clock_timestamp(),
        nullable=False,
    )

    media: Mapped[list["Media"]] = relationship(
        back_populates="bookmark",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Media.id",
    )
    tag_links: Mapped[list["BookmarkTag"]] = relationship(
        back_populates="bookmark",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def tags(self) -> list["Tag"]:
        """Tags attached to this bookmark (requires tag_links to be loaded)."""
        return [link.tag for link in self.tag_links]

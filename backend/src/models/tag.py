"""Tag model and the bookmark/tag association."""
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, String, false, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from models.bookmark import Bookmark


# Tags created at store initialization and exempt from rename/delete.
# Matched by exact name everywhere (see DESIGN.md, "standard tag identity").
STANDARD_TAG_NAMES: tuple[str, ...] = ("To do", "To read")


class Tag(Base, TimestampMixin):
    """Tag model - globally unique by name, shared across all bookmarks."""

    __tablename__ = "tags"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)

    # Links are removed by the FK's ON DELETE CASCADE when a tag is deleted
    bookmark_links: Mapped[list["BookmarkTag"]] = relationship(
        back_populates="tag",
        passive_deletes="all",
    )

    @property
    def is_standard(self) -> bool:
        """Whether this is one of the reserved standard tags."""
        return self.name in STANDARD_TAG_NAMES


class BookmarkTag(Base):
    """
    Association between a bookmark and a tag.

    Carries per-pair state (``completed``) that is owned by the user, not by the
    import, so it must survive re-tagging and re-imports of the bookmark.
    """

    __tablename__ = "bookmark_tags"
    __table_args__ = (
        # Lookups by tag (composite PK already indexes bookmark_id first)
        Index("ix_bookmark_tags_tag_id", "tag_id"),
    )

    bookmark_id: Mapped[str] = mapped_column(
        String(30),
        ForeignKey("bookmarks.id", ondelete="CASCADE"),
        primary_key=True,
    )
    tag_id: Mapped[int] = mapped_column(
        ForeignKey("tags.id", ondelete="CASCADE"),
        primary_key=True,
    )
    completed: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=false(),
        index=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.clock_timestamp(),
        nullable=False,
    )

    bookmark: Mapped["Bookmark"] = relationship(back_populates="tag_links")
    tag: Mapped[Tag] = relationship(back_populates="bookmark_links", lazy="joined")

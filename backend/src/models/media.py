"""Media model for payloads extracted from the export archive."""
from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Integer, LargeBinary, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from models.bookmark import Bookmark


class Media(Base, TimestampMixin):
    """
    A media item attached to a bookmark.

    Owned by its bookmark and deleted with it. ``file_data`` is None when the
    archive entry could not be found or read during import. The payload column is
    deferred so listing media never pulls the blobs.
    """

    __tablename__ = "media"

    id: Mapped[int] = mapped_column(primary_key=True)
    bookmark_id: Mapped[str] = mapped_column(
        String(30),
        ForeignKey("bookmarks.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    type: Mapped[str] = mapped_column(Text, nullable=False)
    url: Mapped[str] = mapped_column(Text, nullable=False, default="")
    thumbnail: Mapped[str] = mapped_column(Text, nullable=False, default="")
    original: Mapped[str] = mapped_column(Text, nullable=False, default="")
    file_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    file_data: Mapped[bytes | None] = mapped_column(
        LargeBinary, nullable=True, deferred=True,
    )
    file_size: Mapped[int | None] = mapped_column(Integer, nullable=True)

    bookmark: Mapped["Bookmark"] = relationship(back_populates="media")

"""Read-only model over the bookmark_views materialized view."""
import json
from datetime import datetime
from typing import Any

from sqlalchemy import Boolean, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from models.base import ViewBase


class BookmarkView(ViewBase):
    """
    Denormalized bookmark row with media and tags embedded as JSON text.

    Rebuilt wholesale by ``REFRESH MATERIALIZED VIEW``; never written directly.
    Rows may lag the primary tables by up to one refresh interval.
    """

    __tablename__ = "bookmark_views"

    id: Mapped[str] = mapped_column(String(30), primary_key=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    full_text: Mapped[str] = mapped_column(Text)
    screen_name: Mapped[str] = mapped_column(String(50))
    name: Mapped[str] = mapped_column(String(100))
    profile_image_url: Mapped[str] = mapped_column(Text)
    favorite_count: Mapped[int] = mapped_column(Integer)
    retweet_count: Mapped[int] = mapped_column(Integer)
    views_count: Mapped[int] = mapped_column(Integer)
    url: Mapped[str] = mapped_column(Text)
    archived: Mapped[bool] = mapped_column(Boolean)
    media_json: Mapped[str] = mapped_column(Text)
    tags_json: Mapped[str] = mapped_column(Text)

    @property
    def media(self) -> list[dict[str, Any]]:
        """Embedded media items decoded from ``media_json``."""
        return json.loads(self.media_json) if self.media_json else []

    @property
    def tags(self) -> list[dict[str, Any]]:
        """Embedded tags (id, name, completed) decoded from ``tags_json``."""
        return json.loads(self.tags_json) if self.tags_json else []

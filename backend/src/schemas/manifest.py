"""Pydantic schemas for the bookmark export manifest."""
import logging
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

logger = logging.getLogger(__name__)


class MediaKind(StrEnum):
    """Closed set of media kinds the archive naming convention distinguishes."""

    PHOTO = "photo"
    VIDEO = "video"
    OTHER = "other"

    @classmethod
    def from_label(cls, label: str) -> "MediaKind":
        """
        Map a raw manifest ``type`` label to a kind.

        Anything that is not exactly "photo" or "video" (e.g. "animated_gif") is
        treated as OTHER rather than rejected.
        """
        try:
            return cls(label)
        except ValueError:
            logger.debug("Unknown media type %r treated as %s", label, cls.OTHER.value)
            return cls.OTHER


class MediaRef(BaseModel):
    """A media item referenced by a manifest record."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    type: str = ""
    url: str = ""
    thumbnail: str = ""
    original: str = ""

    @property
    def kind(self) -> MediaKind:
        """Normalized kind used for extension mapping."""
        return MediaKind.from_label(self.type)


class ImportRecord(BaseModel):
    """
    One bookmarked post as it appears in the export manifest.

    Optional keys missing from the manifest take zero values. ``metadata`` is kept
    as decoded and never interpreted.
    """

    model_config = ConfigDict(extra="ignore")

    id: str = Field(..., min_length=1)
    created_at: str = ""
    full_text: str = ""
    screen_name: str = ""
    name: str = ""
    profile_image_url: str = ""
    in_reply_to: str | None = None
    retweeted_status: str | None = None
    quoted_status: str | None = None
    favorite_count: int = Field(default=0, ge=0)
    retweet_count: int = Field(default=0, ge=0)
    bookmark_count: int = Field(default=0, ge=0)
    quote_count: int = Field(default=0, ge=0)
    reply_count: int = Field(default=0, ge=0)
    views_count: int = Field(default=0, ge=0)
    favorited: bool = False
    retweeted: bool = False
    bookmarked: bool = False
    url: str = ""
    metadata: Any = None
    media: list[MediaRef] = Field(default_factory=list)

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> Any:
        """Accept numeric IDs and store their decimal string form."""
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        if isinstance(v, str):
            return v.strip()
        return v

    @field_validator("media", mode="before")
    @classmethod
    def null_media_is_empty(cls, v: Any) -> Any:
        """Treat ``"media": null`` the same as a missing key."""
        return [] if v is None else v

    @field_validator(
        "full_text", "screen_name", "name", "profile_image_url", "url", "created_at",
        mode="before",
    )
    @classmethod
    def null_string_is_empty(cls, v: Any) -> Any:
        """Treat JSON null as an empty string for plain text fields."""
        return "" if v is None else v

    @field_validator(
        "favorite_count", "retweet_count", "bookmark_count",
        "quote_count", "reply_count", "views_count",
        mode="before",
    )
    @classmethod
    def null_count_is_zero(cls, v: Any) -> Any:
        """Treat JSON null as zero for engagement counters."""
        return 0 if v is None else v

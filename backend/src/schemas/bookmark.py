"""Pydantic schemas for bookmark endpoints."""
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class MediaResponse(BaseModel):
    """Schema for a media item (payload is served separately)."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    type: str
    url: str
    thumbnail: str
    original: str
    file_name: str | None = None
    has_file: bool = False

    @model_validator(mode="before")
    @classmethod
    def derive_has_file(cls, data: Any) -> Any:
        """
        Compute has_file for ORM rows from file_size.

        file_data is deferred, so it is never touched here; reading it would
        trigger a lazy load outside the async context. View rows already carry
        has_file in their JSON.
        """
        if hasattr(data, "__dict__") and not isinstance(data, dict):
            return {
                "id": data.id,
                "type": data.type,
                "url": data.url,
                "thumbnail": data.thumbnail,
                "original": data.original,
                "file_name": data.file_name,
                "has_file": data.file_size is not None,
            }
        return data


class TagWithStatus(BaseModel):
    """Schema for a tag as attached to a bookmark."""

    id: int
    name: str
    completed: bool = False


class BookmarkListItem(BaseModel):
    """
    Schema for bookmark list items, read from the bookmark_views projection.

    Media and tags come from the view's embedded JSON columns.
    """

    model_config = ConfigDict(from_attributes=True)

    id: str
    created_at: datetime
    full_text: str
    screen_name: str
    name: str
    profile_image_url: str
    favorite_count: int
    retweet_count: int
    views_count: int
    url: str
    archived: bool
    media: list[MediaResponse]
    tags: list[TagWithStatus]


class BookmarkResponse(BookmarkListItem):
    """
    Schema for a single bookmark read from the primary tables.

    Note: Uses model_validator to flatten tag links into tags with their
    completed flag.
    """

    bookmark_count: int
    quote_count: int
    reply_count: int
    favorited: bool
    retweeted: bool
    bookmarked: bool
    in_reply_to: str | None = None
    retweeted_status: str | None = None
    quoted_status: str | None = None
    metadata: Any = None
    updated_at: datetime

    @model_validator(mode="before")
    @classmethod
    def flatten_relationships(cls, data: Any) -> Any:
        """Build media and tags from loaded relationships on ORM objects."""
        if not hasattr(data, "__dict__") or isinstance(data, dict):
            return data

        data_dict = {
            key: getattr(data, key)
            for key in (
                "id", "created_at", "full_text", "screen_name", "name",
                "profile_image_url", "favorite_count", "retweet_count",
                "bookmark_count", "quote_count", "reply_count", "views_count",
                "favorited", "retweeted", "bookmarked", "url", "archived",
                "in_reply_to", "retweeted_status", "quoted_status", "updated_at",
            )
        }
        data_dict["metadata"] = data.tweet_metadata
        # Only use relationships that are already loaded
        data_dict["media"] = data.__dict__.get("media") or []
        data_dict["tags"] = [
            TagWithStatus(id=link.tag.id, name=link.tag.name, completed=link.completed)
            for link in data.__dict__.get("tag_links") or []
        ]
        return data_dict


class BookmarkListResponse(BaseModel):
    """Schema for paginated bookmark list responses."""

    bookmarks: list[BookmarkListItem]
    total: int  # Total count of bookmarks matching the query (before pagination)


class BookmarkTagsUpdate(BaseModel):
    """Schema for replacing a bookmark's tags."""

    tags: list[str] = Field(default_factory=list)


class BookmarkTagCompletionUpdate(BaseModel):
    """Schema for marking one of a bookmark's tags as completed."""

    completed: bool


class ArchiveToggleResponse(BaseModel):
    """Schema for the archive toggle response."""

    id: str
    archived: bool


class TagUsage(BaseModel):
    """Schema for a tag and how many active bookmarks use it."""

    name: str
    count: int


class StatisticsResponse(BaseModel):
    """Schema for overall bookmark/tag statistics."""

    total_bookmarks: int
    active_bookmarks: int
    archived_bookmarks: int
    total_tags: int
    top_tags: list[TagUsage]

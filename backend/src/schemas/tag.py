"""Pydantic schemas for tag endpoints."""
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator


class TagResponse(BaseModel):
    """Schema for full tag response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    is_standard: bool
    created_at: datetime


class TagRenameRequest(BaseModel):
    """Schema for renaming a tag."""

    name: str = Field(..., min_length=1, max_length=50)

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v: str) -> str:
        """Trim surrounding whitespace from the new name."""
        if not isinstance(v, str):
            raise ValueError("Tag name must be a string")
        return v.strip()


class TagBookmarkCount(BaseModel):
    """Schema for the number of bookmarks carrying a tag."""

    count: int

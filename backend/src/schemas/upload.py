"""Pydantic schemas for the export upload endpoint."""
from pydantic import BaseModel


class UploadResponse(BaseModel):
    """Schema for a successful import."""

    message: str
    count: int  # Records processed
    media_created: int
    media_missing: int  # Media rows stored without a payload
    timestamps_defaulted: int  # Records whose created_at fell back to import time

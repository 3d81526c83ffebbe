from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
from datetime import datetime

from ytfetch.core.timestamps import as_utc


class VideoSchema(BaseModel):
    id: str = Field(validation_alias="video_id")
    title: str
    description: Optional[str] = None
    published_at: datetime
    thumbnail_url: Optional[str] = None
    channel_title: Optional[str] = None
    channel_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    # Some backends (SQLite) hand back naive values; everything is stored in UTC
    @field_validator("published_at", "created_at", "updated_at")
    @classmethod
    def _utc(cls, value):
        return as_utc(value) if value is not None else None

    class Config:
        from_attributes = True
        populate_by_name = True


class VideoListResponse(BaseModel):
    videos: List[VideoSchema]
    total: int
    limit: int
    next_cursor: Optional[str] = None
    has_more: bool

    class Config:
        from_attributes = True

from datetime import datetime
from pydantic import Field
from acrossmedia.schemas.common import CamelModel, Pagination


class VideoCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=255)
    url: str = Field(..., min_length=1, max_length=512)
    description: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1, max_length=100)
    keywords: list[str] = Field(default_factory=list)
    duration: str | None = None
    uploader: str | None = None


class VideoUpdate(VideoCreate):
    """Full replacement of the editable fields; duration/uploader keep their value when omitted."""


class VideoResponse(CamelModel):
    id: str
    title: str
    url: str
    description: str
    keywords: list[str]
    category: str
    duration: str
    uploader: str
    views: int
    status: str
    created_by: str | None = None
    updated_by: str | None = None
    created_at: datetime
    updated_at: datetime | None = None


class VideoListResponse(CamelModel):
    videos: list[VideoResponse]
    pagination: Pagination

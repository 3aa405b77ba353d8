from datetime import datetime
from typing import Literal
from pydantic import Field
from acrossmedia.schemas.common import CamelModel

Theme = Literal["dark", "light", "auto"]


class SiteSettingsResponse(CamelModel):
    type: str
    site_name: str
    site_description: str | None = None
    theme: str
    email_notifications: bool
    auto_approve: bool
    max_file_size: int
    allowed_file_types: list[str]
    timezone: str
    updated_by: str | None = None
    created_at: datetime
    updated_at: datetime


class SiteSettingsUpdate(CamelModel):
    """Partial update; only fields present in the request body are written."""
    site_name: str | None = Field(None, min_length=1, max_length=255)
    site_description: str | None = None
    theme: Theme | None = None
    email_notifications: bool | None = None
    auto_approve: bool | None = None
    max_file_size: int | None = Field(None, ge=1, le=1024)
    allowed_file_types: list[str] | None = None
    timezone: str | None = Field(None, min_length=1, max_length=64)

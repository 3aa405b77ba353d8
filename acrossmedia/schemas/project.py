from datetime import datetime
from pydantic import Field
from acrossmedia.models.project import ProjectStatus
from acrossmedia.schemas.common import CamelModel, Pagination


class ProjectCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1, max_length=100)
    client: str = Field(..., min_length=1, max_length=255)
    image: str | None = None
    status: ProjectStatus | None = None
    keywords: list[str] = Field(default_factory=list)


class ProjectUpdate(ProjectCreate):
    """Full replacement of the editable fields; image/status keep their value when omitted."""


class ProjectResponse(CamelModel):
    id: str
    title: str
    description: str
    image: str
    category: str
    status: str
    keywords: list[str]
    client: str
    created_by: str | None = None
    updated_by: str | None = None
    created_at: datetime
    updated_at: datetime | None = None


class ProjectListResponse(CamelModel):
    projects: list[ProjectResponse]
    pagination: Pagination

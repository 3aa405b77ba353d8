import logging
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from acrossmedia.auth import get_current_admin_user
from acrossmedia.database import get_db
from acrossmedia.models.admin import Admin
from acrossmedia.models.project import DEFAULT_PROJECT_IMAGE, Project, ProjectStatus
from acrossmedia.schemas.common import MessageResponse, Pagination
from acrossmedia.schemas.project import ProjectCreate, ProjectListResponse, ProjectResponse, ProjectUpdate
from acrossmedia.utils.query import equals_filter, paginate, search_filter, validate_id

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/projects", tags=["projects"])


def _to_response(p: Project) -> ProjectResponse:
    return ProjectResponse(
        id=p.id,
        title=p.title,
        description=p.description,
        image=p.image or DEFAULT_PROJECT_IMAGE,
        category=p.category,
        status=p.status,
        keywords=p.keywords or [],
        client=p.client,
        created_by=p.created_by_id,
        updated_by=p.updated_by_id,
        created_at=p.created_at,
        updated_at=p.updated_at,
    )


def _get_project_or_404(db: Session, project_id: str) -> Project:
    project = db.query(Project).filter(Project.id == validate_id(project_id, "project")).first()
    if not project:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found")
    return project


@router.get("", response_model=ProjectListResponse)
def list_projects(
    page: int = Query(1, ge=1),
    limit: int = Query(12, ge=1, le=100),
    search: str | None = None,
    category: str | None = None,
    status_filter: str | None = Query(None, alias="status"),
    db: Session = Depends(get_db),
):
    """Public: newest first. Search matches title, description or client."""
    q = db.query(Project)
    q = search_filter(q, search, Project.title, Project.description, Project.client)
    q = equals_filter(q, Project.category, category)
    q = equals_filter(q, Project.status, status_filter)
    projects, total = paginate(q.order_by(Project.created_at.desc()), page, limit)
    return ProjectListResponse(
        projects=[_to_response(p) for p in projects],
        pagination=Pagination.build(page, limit, total),
    )


@router.post("", response_model=ProjectResponse, status_code=status.HTTP_201_CREATED)
def create_project(
    body: ProjectCreate,
    admin: Admin = Depends(get_current_admin_user),
    db: Session = Depends(get_db),
):
    project = Project(
        title=body.title,
        description=body.description,
        image=body.image or DEFAULT_PROJECT_IMAGE,
        category=body.category,
        status=(body.status or ProjectStatus.ONGOING).value,
        keywords=body.keywords,
        client=body.client,
        created_by_id=admin.id,
    )
    db.add(project)
    db.commit()
    db.refresh(project)
    logger.info("Project %s created by %s", project.id, admin.username)
    return _to_response(project)


@router.get("/{project_id}", response_model=ProjectResponse)
def get_project(project_id: str, db: Session = Depends(get_db)):
    return _to_response(_get_project_or_404(db, project_id))


@router.put("/{project_id}", response_model=ProjectResponse)
def update_project(
    project_id: str,
    body: ProjectUpdate,
    admin: Admin = Depends(get_current_admin_user),
    db: Session = Depends(get_db),
):
    project = _get_project_or_404(db, project_id)
    project.title = body.title
    project.description = body.description
    project.category = body.category
    project.client = body.client
    project.keywords = body.keywords
    if body.image:
        project.image = body.image
    if body.status:
        project.status = body.status.value
    project.updated_by_id = admin.id
    db.commit()
    db.refresh(project)
    return _to_response(project)


@router.delete("/{project_id}", response_model=MessageResponse)
def delete_project(
    project_id: str,
    admin: Admin = Depends(get_current_admin_user),
    db: Session = Depends(get_db),
):
    project = _get_project_or_404(db, project_id)
    db.delete(project)
    db.commit()
    logger.info("Project %s deleted by %s", project_id, admin.username)
    return MessageResponse(message="Project deleted successfully")

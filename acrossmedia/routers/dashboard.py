from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from acrossmedia.auth import get_current_admin_user
from acrossmedia.database import get_db
from acrossmedia.models.admin import Admin
from acrossmedia.schemas.dashboard import DashboardResponse
from acrossmedia.services.dashboard import build_dashboard

router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])


@router.get("", response_model=DashboardResponse)
def get_dashboard(
    _admin: Admin = Depends(get_current_admin_user),
    db: Session = Depends(get_db),
):
    return build_dashboard(db)

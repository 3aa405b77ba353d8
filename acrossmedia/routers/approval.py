"""Approve a pending admin from the link emailed to the superadmin (GET, opened in a browser)."""
from datetime import datetime
from fastapi import APIRouter, BackgroundTasks, Depends, Request
from fastapi.responses import HTMLResponse
from sqlalchemy.orm import Session

from acrossmedia.database import get_db
from acrossmedia.models.admin import Admin
from acrossmedia.services.admin_accounts import approve_admin
from acrossmedia.services.email_service import send_approval_notification
from acrossmedia.services.security_events import log_security_event

router = APIRouter(prefix="/api/auth", tags=["approval"])


@router.get("/approve/{token}", response_class=HTMLResponse)
def approve_by_token(
    token: str,
    request: Request,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
):
    admin = db.query(Admin).filter(Admin.approval_token == token).first()
    if not admin:
        return HTMLResponse("<h2>Invalid or expired approval link.</h2>", status_code=400)
    if not admin.approval_token_expires or datetime.utcnow() > admin.approval_token_expires:
        return HTMLResponse("<h2>Approval link has expired.</h2>", status_code=400)
    approve_admin(db, admin, approved_by_id=None)
    log_security_event("ADMIN_APPROVED", {"username": admin.username, "by": "email link"}, request)
    background_tasks.add_task(send_approval_notification, admin.email, admin.username)
    return HTMLResponse("<h2>Admin approved successfully!</h2>")

import logging
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.orm import Session
from acrossmedia.auth import get_current_admin_user, get_current_superadmin, hash_password, verify_password
from acrossmedia.database import get_db
from acrossmedia.models.admin import Admin
from acrossmedia.models.site_setting import SiteSetting
from acrossmedia.schemas.admin import AdminResponse, ProfileUpdate
from acrossmedia.schemas.settings import SiteSettingsResponse, SiteSettingsUpdate
from acrossmedia.services.admin_accounts import admin_to_response
from acrossmedia.services.site_settings import get_site_settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/settings", tags=["settings"])


def _to_response(row: SiteSetting) -> SiteSettingsResponse:
    return SiteSettingsResponse(
        type=row.type,
        site_name=row.site_name,
        site_description=row.site_description,
        theme=row.theme,
        email_notifications=row.email_notifications,
        auto_approve=row.auto_approve,
        max_file_size=row.max_file_size,
        allowed_file_types=row.allowed_file_types or [],
        timezone=row.timezone,
        updated_by=row.updated_by_id,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


@router.get("", response_model=SiteSettingsResponse)
def read_settings(
    _admin: Admin = Depends(get_current_admin_user),
    db: Session = Depends(get_db),
):
    return _to_response(get_site_settings(db))


@router.put("", response_model=SiteSettingsResponse)
def update_settings(
    body: SiteSettingsUpdate,
    superadmin: Admin = Depends(get_current_superadmin),
    db: Session = Depends(get_db),
):
    row = get_site_settings(db)
    for field, value in body.model_dump(exclude_unset=True).items():
        if value is not None:
            setattr(row, field, value)
    row.updated_by_id = superadmin.id
    db.commit()
    db.refresh(row)
    logger.info("Site settings updated by %s", superadmin.username)
    return _to_response(row)


@router.get("/profile", response_model=AdminResponse)
def read_profile(admin: Admin = Depends(get_current_admin_user)):
    return admin_to_response(admin)


@router.put("/profile", response_model=AdminResponse)
async def update_profile(
    body: ProfileUpdate,
    admin: Admin = Depends(get_current_admin_user),
    db: Session = Depends(get_db),
):
    """Change own username, email and/or password. A new password needs the current one."""
    changes = {}

    if body.username and body.username != admin.username:
        taken = db.query(Admin).filter(Admin.username == body.username, Admin.id != admin.id).first()
        if taken:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Username is already taken")
        changes["username"] = body.username

    if body.email and body.email != admin.email:
        taken = db.query(Admin).filter(Admin.email == body.email, Admin.id != admin.id).first()
        if taken:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email is already taken")
        changes["email"] = body.email

    if body.new_password:
        if not body.current_password:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Current password is required to set new password",
            )
        valid = await run_in_threadpool(verify_password, body.current_password, admin.password)
        if not valid:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Current password is incorrect")
        changes["password"] = await run_in_threadpool(hash_password, body.new_password)

    if not changes:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No changes to update")

    for field, value in changes.items():
        setattr(admin, field, value)
    admin.updated_by_id = admin.id
    db.commit()
    db.refresh(admin)
    logger.info("Profile updated for %s (%s)", admin.username, ", ".join(sorted(changes)))
    return admin_to_response(admin)

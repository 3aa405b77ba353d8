"""
Admin account lifecycle: pending -> admin (approval) and the re-registration throttle
for accounts that are still pending.
"""
import logging
import math
from datetime import datetime, timedelta
from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from acrossmedia.config import Settings, get_settings
from acrossmedia.models.admin import Admin, AdminRole, AdminStatus
from acrossmedia.schemas.admin import AdminResponse

logger = logging.getLogger(__name__)

PENDING_MESSAGE = "Account already exists and is pending approval. Please wait for admin approval."


def admin_to_response(admin: Admin) -> AdminResponse:
    return AdminResponse(
        id=admin.id,
        username=admin.username,
        email=admin.email,
        role=admin.role,
        status=admin.status,
        registration_attempts=admin.registration_attempts or 0,
        approved_at=admin.approved_at,
        created_at=admin.created_at,
        updated_at=admin.updated_at,
    )


def throttle_pending_registration(
    db: Session,
    admin: Admin,
    now: datetime,
    settings: Settings | None = None,
) -> None:
    """
    Someone tried to register again with the username/email of a pending account.
    Always raises: 409 while under the limit, 429 once blocked. An elapsed block resets the counter.
    """
    settings = settings or get_settings()
    if admin.block_until and now > admin.block_until:
        admin.registration_attempts = 0
        admin.block_until = None
        db.commit()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=PENDING_MESSAGE)

    if admin.block_until and now <= admin.block_until:
        minutes_left = math.ceil((admin.block_until - now).total_seconds() / 60)
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail=f"Too many registration attempts. Please try again in {minutes_left} minute(s).",
        )

    attempts = (admin.registration_attempts or 0) + 1
    admin.registration_attempts = attempts
    if attempts >= settings.registration_max_attempts:
        admin.block_until = now + timedelta(minutes=settings.registration_block_minutes)
        db.commit()
        logger.warning("Registration for pending account %s blocked after %d attempts", admin.username, attempts)
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail=(
                "Too many registration attempts. "
                f"Please try again in {settings.registration_block_minutes} minute(s)."
            ),
        )
    db.commit()
    raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=PENDING_MESSAGE)


def approve_admin(db: Session, admin: Admin, approved_by_id: str | None) -> Admin:
    """Promote a pending account to admin and invalidate its emailed approval link."""
    admin.role = AdminRole.ADMIN.value
    admin.status = AdminStatus.ACTIVE.value
    admin.approved_at = datetime.utcnow()
    admin.approved_by_id = approved_by_id
    admin.approval_token = None
    admin.approval_token_expires = None
    admin.registration_attempts = 0
    admin.block_until = None
    db.commit()
    db.refresh(admin)
    logger.info("Admin %s approved by %s", admin.username, approved_by_id or "email link")
    return admin


def find_superadmin(db: Session) -> Admin | None:
    return (
        db.query(Admin)
        .filter(Admin.role == AdminRole.SUPERADMIN.value)
        .order_by(Admin.created_at.asc())
        .first()
    )

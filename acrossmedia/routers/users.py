from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from acrossmedia.auth import get_current_admin_user, get_current_superadmin
from acrossmedia.database import get_db
from acrossmedia.models.admin import Admin, AdminRole
from acrossmedia.schemas.admin import RoleUpdate, StatusUpdate, UserListResponse
from acrossmedia.schemas.common import MessageResponse, Pagination
from acrossmedia.services.admin_accounts import admin_to_response, approve_admin
from acrossmedia.services.email_service import send_approval_notification
from acrossmedia.utils.query import equals_filter, paginate, search_filter, validate_id

router = APIRouter(prefix="/api/users", tags=["users"])


def _get_user_or_404(db: Session, user_id: str) -> Admin:
    user = db.query(Admin).filter(Admin.id == validate_id(user_id, "user")).first()
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


@router.get("", response_model=UserListResponse)
def list_users(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: str | None = None,
    role: str | None = None,
    status_filter: str | None = Query(None, alias="status"),
    _admin: Admin = Depends(get_current_admin_user),
    db: Session = Depends(get_db),
):
    """List admin accounts (admin only). Search matches username or email."""
    q = db.query(Admin)
    q = search_filter(q, search, Admin.username, Admin.email)
    q = equals_filter(q, Admin.role, role)
    q = equals_filter(q, Admin.status, status_filter)
    users, total = paginate(q.order_by(Admin.created_at.desc()), page, limit)
    return UserListResponse(
        users=[admin_to_response(u) for u in users],
        pagination=Pagination.build(page, limit, total),
    )


@router.post("/approve/{user_id}", response_model=MessageResponse)
def approve_user(
    user_id: str,
    background_tasks: BackgroundTasks,
    admin: Admin = Depends(get_current_admin_user),
    db: Session = Depends(get_db),
):
    """Approve a pending account (admin only)."""
    user = _get_user_or_404(db, user_id)
    if user.role != AdminRole.PENDING.value:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="User is not pending approval")
    approve_admin(db, user, admin.id)
    background_tasks.add_task(send_approval_notification, user.email, user.username)
    return MessageResponse(message="User approved successfully")


@router.put("/role/{user_id}", response_model=MessageResponse)
def update_role(
    user_id: str,
    body: RoleUpdate,
    admin: Admin = Depends(get_current_admin_user),
    db: Session = Depends(get_db),
):
    """
    Change an approved account's role. Only a superadmin may grant or revoke superadmin,
    and nobody changes their own role.
    """
    user = _get_user_or_404(db, user_id)
    if user.id == admin.id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Cannot change your own role")
    if user.role == AdminRole.PENDING.value:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Pending accounts must be approved first",
        )
    touches_superadmin = AdminRole.SUPERADMIN.value in (body.role, user.role)
    if touches_superadmin and admin.role != AdminRole.SUPERADMIN.value:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only superadmin can assign or revoke superadmin role",
        )
    user.role = body.role
    user.updated_by_id = admin.id
    db.commit()
    return MessageResponse(message="User role updated successfully")


@router.put("/status/{user_id}", response_model=MessageResponse)
def update_status(
    user_id: str,
    body: StatusUpdate,
    admin: Admin = Depends(get_current_admin_user),
    db: Session = Depends(get_db),
):
    """Activate, deactivate or suspend an account. Inactive and suspended accounts cannot log in."""
    user = _get_user_or_404(db, user_id)
    if user.id == admin.id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Cannot change your own status")
    if user.role == AdminRole.SUPERADMIN.value and admin.role != AdminRole.SUPERADMIN.value:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only superadmin can change a superadmin's status",
        )
    user.status = body.status.value
    user.updated_by_id = admin.id
    db.commit()
    return MessageResponse(message="User status updated successfully")


@router.delete("/{user_id}", response_model=MessageResponse)
def delete_user(
    user_id: str,
    superadmin: Admin = Depends(get_current_superadmin),
    db: Session = Depends(get_db),
):
    """Delete an account (superadmin only). Not yourself, not another superadmin."""
    user = _get_user_or_404(db, user_id)
    if user.id == superadmin.id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Cannot delete your own account")
    if user.role == AdminRole.SUPERADMIN.value:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Cannot delete superadmin accounts")
    db.delete(user)
    db.commit()
    return MessageResponse(message="User deleted successfully")

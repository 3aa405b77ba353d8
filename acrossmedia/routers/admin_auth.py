"""
Admin authentication: login (behind the login defenses), logout, registration of pending
accounts, superadmin approval, and session status. Session = signed JWT in an HTTP-only cookie.
"""
import asyncio
import logging
import secrets
from datetime import datetime, timedelta, timezone
from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request, Response, status
from fastapi.concurrency import run_in_threadpool
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from acrossmedia.auth import (
    clear_auth_cookie,
    cookie_scheme,
    create_access_token,
    get_admin_from_token,
    get_current_admin,
    get_current_superadmin,
    hash_password,
    set_auth_cookie,
    verify_password,
)
from acrossmedia.config import get_settings
from acrossmedia.database import get_db
from acrossmedia.errors import ACCOUNT_DISABLED, INVALID_CREDENTIALS, PENDING_APPROVAL, ApiError
from acrossmedia.models.admin import Admin, AdminRole, AdminStatus
from acrossmedia.schemas.admin import (
    AdminResponse,
    AdminSummary,
    AuthStatusResponse,
    CaptchaResponse,
    LoginRequest,
    LoginResponse,
    RegisterRequest,
    RegisterResponse,
)
from acrossmedia.services.admin_accounts import (
    admin_to_response,
    approve_admin,
    find_superadmin,
    throttle_pending_registration,
)
from acrossmedia.services.email_service import send_approval_notification, send_approval_request_email
from acrossmedia.services.login_guard import LoginGuard, request_client_key
from acrossmedia.services.security_events import log_security_event
from acrossmedia.services.security_store import get_security_store
from acrossmedia.services.site_settings import email_notifications_enabled

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth/admin", tags=["admin-auth"])
settings = get_settings()


async def get_login_guard(store=Depends(get_security_store)) -> LoginGuard:
    return LoginGuard(store)


async def login_throttle(
    request: Request,
    response: Response,
    guard: LoginGuard = Depends(get_login_guard),
) -> str:
    """Rate limit + progressive delay. Runs before the body is validated so malformed attempts count too."""
    key = request_client_key(request)
    state = await guard.hit_rate_limit(key, request)
    headers = state.headers(guard.now())
    for name, value in headers.items():
        response.headers[name] = value
    # error responses are built by the app handlers, which pick these up
    request.state.response_headers = headers
    delay_ms = await guard.slow_down_ms(key)
    if delay_ms:
        await asyncio.sleep(delay_ms / 1000)
    return key


@router.get("/captcha", response_model=CaptchaResponse)
async def get_captcha(guard: LoginGuard = Depends(get_login_guard)):
    """Issue an arithmetic challenge for a suspicious login."""
    challenge = await guard.issue_captcha()
    return CaptchaResponse(
        id=challenge.id,
        question=challenge.question,
        expires_at=datetime.fromtimestamp(challenge.expires_at, tz=timezone.utc),
    )


@router.post("/login", response_model=LoginResponse)
async def login(
    body: LoginRequest,
    request: Request,
    response: Response,
    client_key: str = Depends(login_throttle),
    guard: LoginGuard = Depends(get_login_guard),
    db: Session = Depends(get_db),
):
    """Login with username and password. Sets the session cookie on success."""
    await guard.check_lockout(body.username)
    if await guard.record_attempt(client_key, request):
        await guard.require_captcha(body.captcha_id, body.captcha_answer, request)

    admin = db.query(Admin).filter(Admin.username == body.username).first()
    valid = await run_in_threadpool(verify_password, body.password, admin.password if admin else None)
    if not admin or not valid:
        attempts = await guard.register_failure(body.username, request)
        log_security_event("LOGIN_FAILED", {"username": body.username, "attempts": attempts}, request)
        raise ApiError(status.HTTP_401_UNAUTHORIZED, "Invalid username or password.", INVALID_CREDENTIALS)

    if admin.role == AdminRole.PENDING.value:
        raise ApiError(
            status.HTTP_403_FORBIDDEN,
            "Your account is still pending approval. Please wait for admin confirmation.",
            PENDING_APPROVAL,
        )
    if admin.status != AdminStatus.ACTIVE.value:
        raise ApiError(
            status.HTTP_403_FORBIDDEN,
            f"Your account is {admin.status}. Please contact a superadmin.",
            ACCOUNT_DISABLED,
        )

    await guard.clear_failures(body.username)
    await guard.release_rate_limit(client_key)
    set_auth_cookie(response, create_access_token(admin))
    logger.info("Admin %s logged in", admin.username)
    return LoginResponse(message=f"Login successful as {admin.role}.", role=admin.role)


@router.post("/logout")
def logout(response: Response):
    clear_auth_cookie(response)
    return {"success": True, "message": "Logout successful"}


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
def register(
    body: RegisterRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
):
    """
    Register a pending admin account and email the approval link to the superadmin.
    Repeated registrations for a still-pending account are throttled (3 tries, then a 10 minute block).
    """
    now = datetime.utcnow()
    existing = (
        db.query(Admin)
        .filter(or_(Admin.username == body.username, Admin.email == body.email))
        .first()
    )
    if existing and existing.role != AdminRole.PENDING.value:
        detail = "Username is already taken." if existing.username == body.username else "Email is already registered."
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)
    if existing:
        throttle_pending_registration(db, existing, now)

    admin = Admin(
        username=body.username,
        email=body.email,
        password=hash_password(body.password),
        role=AdminRole.PENDING.value,
        registration_attempts=0,
        block_until=None,
        approval_token=secrets.token_hex(32),
        approval_token_expires=now + timedelta(minutes=settings.approval_token_expire_minutes),
        created_at=now,
    )
    db.add(admin)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Username or email already in use.")
    db.refresh(admin)

    if email_notifications_enabled(db):
        superadmin = find_superadmin(db)
        if superadmin:
            background_tasks.add_task(
                send_approval_request_email,
                superadmin.email,
                admin.username,
                admin.email,
                admin.created_at,
                admin.approval_token,
            )
        else:
            logger.warning("No superadmin found to notify about registration of %s", admin.username)

    return RegisterResponse(
        message="Registration successful. Awaiting admin approval.",
        user=AdminSummary(id=admin.id, username=admin.username, email=admin.email, role=admin.role),
        pending_session_token=secrets.token_hex(16),
    )


@router.post("/approve/{admin_id}")
def approve(
    admin_id: str,
    request: Request,
    background_tasks: BackgroundTasks,
    superadmin: Admin = Depends(get_current_superadmin),
    db: Session = Depends(get_db),
):
    """Superadmin: promote a pending account to admin."""
    admin = db.query(Admin).filter(Admin.id == admin_id).first()
    if not admin:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Admin not found")
    if admin.role != AdminRole.PENDING.value:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Admin is already approved or has a different status",
        )
    approve_admin(db, admin, superadmin.id)
    log_security_event("ADMIN_APPROVED", {"username": admin.username, "by": superadmin.username}, request)
    background_tasks.add_task(send_approval_notification, admin.email, admin.username)
    return {"message": f"Admin {admin.username} approved successfully"}


@router.get("/check-status", response_model=AuthStatusResponse, response_model_exclude_none=True)
def check_status(
    response: Response,
    token: str | None = Depends(cookie_scheme),
    db: Session = Depends(get_db),
):
    """Whether the cookie holds a valid session, and whether that account is still pending."""
    if not token:
        return AuthStatusResponse(is_authenticated=False)
    admin = get_admin_from_token(token, db)
    if not admin:
        clear_auth_cookie(response)
        return AuthStatusResponse(is_authenticated=False)
    return AuthStatusResponse(
        is_authenticated=True,
        pending_approval=admin.role == AdminRole.PENDING.value,
        role=admin.role,
    )


@router.get("/pending", response_model=list[AdminResponse])
def list_pending(
    _superadmin: Admin = Depends(get_current_superadmin),
    db: Session = Depends(get_db),
):
    """Superadmin: accounts awaiting approval, oldest first."""
    admins = (
        db.query(Admin)
        .filter(Admin.role == AdminRole.PENDING.value)
        .order_by(Admin.created_at.asc())
        .all()
    )
    return [admin_to_response(a) for a in admins]


@router.get("/me", response_model=AdminResponse)
def get_me(admin: Admin = Depends(get_current_admin)):
    return admin_to_response(admin)

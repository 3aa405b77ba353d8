from datetime import datetime, timedelta
from functools import lru_cache
from jose import JWTError, jwt
from passlib.context import CryptContext
from fastapi import Depends, HTTPException, Response, status
from fastapi.security import APIKeyCookie
from sqlalchemy.orm import Session
from acrossmedia.config import get_settings
from acrossmedia.database import get_db
from acrossmedia.models.admin import Admin, AdminRole, AdminStatus
from acrossmedia.schemas.admin import TokenPayload

settings = get_settings()
cookie_scheme = APIKeyCookie(name=settings.auth_cookie_name, auto_error=False)

# Use Argon2 for password hashing
pwd_context = CryptContext(
    schemes=["argon2"],
    deprecated="auto",
)


@lru_cache
def _dummy_hash() -> str:
    return pwd_context.hash("dummy-password-for-timing-equalisation")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str | None) -> bool:
    """
    Constant-effort check: unknown users and malformed hashes still pay for one
    full hash verification so response time does not reveal which case failed.
    """
    if not hashed:
        pwd_context.verify(plain, _dummy_hash())
        return False
    try:
        return pwd_context.verify(plain, hashed)
    except (ValueError, TypeError):
        pwd_context.verify(plain, _dummy_hash())
        return False


def create_access_token(admin: Admin) -> str:
    now = datetime.utcnow()
    expire = now + timedelta(minutes=settings.access_token_expire_minutes)
    payload = {
        "sub": admin.id,
        "username": admin.username,
        "role": admin.role,
        "iat": now,
        "exp": expire,
        "iss": settings.jwt_issuer,
        "aud": settings.jwt_audience,
        "type": "access",
    }
    return jwt.encode(payload, settings.secret_key, algorithm=settings.algorithm)


def decode_token(token: str) -> TokenPayload | None:
    try:
        payload = jwt.decode(
            token,
            settings.secret_key,
            algorithms=[settings.algorithm],
            audience=settings.jwt_audience,
            issuer=settings.jwt_issuer,
        )
        return TokenPayload(
            sub=payload["sub"],
            username=payload["username"],
            role=payload["role"],
            exp=payload["exp"],
        )
    except (JWTError, KeyError):
        return None


def set_auth_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=settings.auth_cookie_name,
        value=token,
        max_age=settings.access_token_expire_minutes * 60,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="strict",
        path="/",
    )


def clear_auth_cookie(response: Response) -> None:
    response.delete_cookie(
        key=settings.auth_cookie_name,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="strict",
        path="/",
    )


def get_admin_from_token(token: str | None, db: Session) -> Admin | None:
    """Resolve the cookie token to an account. Returns None if missing, invalid or deleted."""
    if not token:
        return None
    payload = decode_token(token)
    if not payload:
        return None
    return db.query(Admin).filter(Admin.id == payload.sub).first()


def get_current_admin(
    token: str | None = Depends(cookie_scheme),
    db: Session = Depends(get_db),
) -> Admin:
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication token missing",
        )

    payload = decode_token(token)
    if not payload:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
        )

    admin = db.query(Admin).filter(Admin.id == payload.sub).first()
    if not admin:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Account not found",
        )

    return admin


def get_current_admin_user(
    admin: Admin = Depends(get_current_admin),
) -> Admin:
    """Account must be an approved, active admin or superadmin."""
    if admin.role not in (AdminRole.ADMIN.value, AdminRole.SUPERADMIN.value):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Access denied. Admin privileges required.",
        )
    if admin.status != AdminStatus.ACTIVE.value:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is not active.",
        )
    return admin


def get_current_superadmin(
    admin: Admin = Depends(get_current_admin_user),
) -> Admin:
    if admin.role != AdminRole.SUPERADMIN.value:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Access denied. Superadmin privileges required.",
        )
    return admin

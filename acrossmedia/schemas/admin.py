from datetime import datetime
from typing import Literal
from pydantic import BaseModel, EmailStr, field_validator
from acrossmedia.models.admin import AdminStatus
from acrossmedia.schemas.common import CamelModel, Pagination
from acrossmedia.services.password_policy import (
    validate_login_password,
    validate_password_strength,
    validate_username,
)


class TokenPayload(BaseModel):
    sub: str  # admin id
    username: str
    role: str
    exp: int
    type: str = "access"


class LoginRequest(CamelModel):
    username: str
    password: str
    captcha_id: str | None = None
    captcha_answer: str | None = None

    @field_validator("username")
    @classmethod
    def _username(cls, v: str) -> str:
        return validate_username(v)

    @field_validator("password")
    @classmethod
    def _password(cls, v: str) -> str:
        return validate_login_password(v)


class LoginResponse(CamelModel):
    success: bool = True
    message: str
    role: str


class RegisterRequest(CamelModel):
    username: str
    email: EmailStr
    password: str

    @field_validator("username")
    @classmethod
    def _username(cls, v: str) -> str:
        return validate_username(v)

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        return v.strip().lower()

    @field_validator("password")
    @classmethod
    def _password(cls, v: str) -> str:
        result = validate_password_strength(v)
        if not result.is_valid:
            raise ValueError("Password is too weak: " + "; ".join(result.suggestions))
        return v


class AdminSummary(CamelModel):
    id: str
    username: str
    email: str
    role: str


class RegisterResponse(CamelModel):
    success: bool = True
    message: str
    user: AdminSummary
    pending_session_token: str


class AdminResponse(CamelModel):
    """Account as shown in the admin panel. Never includes the password hash or approval token."""
    id: str
    username: str
    email: str
    role: str
    status: str
    registration_attempts: int
    approved_at: datetime | None = None
    created_at: datetime
    updated_at: datetime


class UserListResponse(CamelModel):
    users: list[AdminResponse]
    pagination: Pagination


class AuthStatusResponse(CamelModel):
    is_authenticated: bool
    pending_approval: bool | None = None
    role: str | None = None


class CaptchaResponse(CamelModel):
    id: str
    question: str
    expires_at: datetime


class RoleUpdate(CamelModel):
    role: Literal["admin", "superadmin"]


class StatusUpdate(CamelModel):
    status: AdminStatus


class ProfileUpdate(CamelModel):
    """All fields optional; new_password requires current_password."""
    username: str | None = None
    email: EmailStr | None = None
    current_password: str | None = None
    new_password: str | None = None

    @field_validator("username")
    @classmethod
    def _username(cls, v: str | None) -> str | None:
        return validate_username(v) if v is not None else None

    @field_validator("email")
    @classmethod
    def _email(cls, v: str | None) -> str | None:
        return v.strip().lower() if v is not None else None

    @field_validator("new_password")
    @classmethod
    def _new_password(cls, v: str | None) -> str | None:
        if v is None:
            return None
        result = validate_password_strength(v)
        if not result.is_valid:
            raise ValueError("Password is too weak: " + "; ".join(result.suggestions))
        return v

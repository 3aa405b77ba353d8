import uuid
import enum
from datetime import datetime
from sqlalchemy import Column, String, Integer, DateTime
from acrossmedia.database import Base


class AdminRole(str, enum.Enum):
    PENDING = "pending"
    ADMIN = "admin"
    SUPERADMIN = "superadmin"


class AdminStatus(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    SUSPENDED = "suspended"


class Admin(Base):
    """Back-office account. Created as pending at registration, promoted to admin on approval."""
    __tablename__ = "admins"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    username = Column(String(50), unique=True, nullable=False, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, default=AdminRole.PENDING.value, index=True)
    status = Column(String(20), nullable=False, default=AdminStatus.ACTIVE.value)
    registration_attempts = Column(Integer, nullable=False, default=0)
    block_until = Column(DateTime, nullable=True)
    approval_token = Column(String(64), nullable=True, unique=True, index=True)
    approval_token_expires = Column(DateTime, nullable=True)
    approved_at = Column(DateTime, nullable=True)
    approved_by_id = Column(String(36), nullable=True)
    updated_by_id = Column(String(36), nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

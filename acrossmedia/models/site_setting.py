"""Site-wide settings. One row, looked up by type="site"; created with defaults on first read."""
from datetime import datetime
from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, JSON
from acrossmedia.database import Base

SITE_SETTINGS_TYPE = "site"
DEFAULT_ALLOWED_FILE_TYPES = ["jpg", "jpeg", "png", "gif", "mp4", "mov", "avi"]


class SiteSetting(Base):
    __tablename__ = "site_settings"

    id = Column(Integer, primary_key=True, autoincrement=True)
    type = Column(String(20), nullable=False, unique=True, default=SITE_SETTINGS_TYPE)
    site_name = Column(String(255), nullable=False, default="AcrossMedia Admin")
    site_description = Column(Text, nullable=True, default="Professional media management platform")
    theme = Column(String(20), nullable=False, default="dark")
    email_notifications = Column(Boolean, nullable=False, default=True)
    auto_approve = Column(Boolean, nullable=False, default=False)
    max_file_size = Column(Integer, nullable=False, default=10)  # MB
    allowed_file_types = Column(JSON, nullable=False, default=lambda: list(DEFAULT_ALLOWED_FILE_TYPES))
    timezone = Column(String(64), nullable=False, default="UTC")
    updated_by_id = Column(String(36), nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

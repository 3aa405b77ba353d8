import uuid
import enum
from datetime import datetime
from sqlalchemy import Column, String, Text, DateTime, JSON
from acrossmedia.database import Base

DEFAULT_PROJECT_IMAGE = "https://images.pexels.com/photos/3184300/pexels-photo-3184300.jpeg?auto=compress&cs=tinysrgb&w=800"


class ProjectStatus(str, enum.Enum):
    ONGOING = "ongoing"
    COMPLETED = "completed"
    UPCOMING = "upcoming"


class Project(Base):
    __tablename__ = "projects"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    image = Column(String(1024), nullable=False, default=DEFAULT_PROJECT_IMAGE)
    category = Column(String(100), nullable=False, index=True)
    status = Column(String(20), nullable=False, default=ProjectStatus.ONGOING.value, index=True)
    keywords = Column(JSON, nullable=False, default=list)
    client = Column(String(255), nullable=False)
    created_by_id = Column(String(36), nullable=True)
    updated_by_id = Column(String(36), nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, nullable=True, onupdate=datetime.utcnow)

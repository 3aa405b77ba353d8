"""Video listed on the public videos page. The url points at an external player (YouTube)."""
import uuid
from datetime import datetime
from sqlalchemy import Column, String, Text, Integer, DateTime, JSON
from acrossmedia.database import Base


class Video(Base):
    __tablename__ = "videos"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    title = Column(String(255), nullable=False)
    url = Column(String(512), nullable=False)
    description = Column(Text, nullable=False)
    keywords = Column(JSON, nullable=False, default=list)
    category = Column(String(100), nullable=False, index=True)
    duration = Column(String(20), nullable=False, default="N/A")
    uploader = Column(String(100), nullable=False, default="Admin")
    views = Column(Integer, nullable=False, default=0)
    status = Column(String(20), nullable=False, default="published")
    created_by_id = Column(String(36), nullable=True)
    updated_by_id = Column(String(36), nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, nullable=True, onupdate=datetime.utcnow)

from datetime import datetime
from typing import Literal
from acrossmedia.schemas.common import CamelModel


class ActivityItem(CamelModel):
    id: str
    type: Literal["video", "project"]
    title: str
    time: str
    created_at: datetime


class MonthlyAnalytics(CamelModel):
    month: str
    year: int
    videos: int
    views: int


class DashboardResponse(CamelModel):
    total_videos: int
    total_projects: int
    total_users: int
    pending_users: int
    total_views: int
    recent_activity: list[ActivityItem]
    analytics: list[MonthlyAnalytics]

"""
Dashboard numbers: totals, a merged recent-activity feed and per-month video analytics.
"""
from datetime import datetime
from sqlalchemy import func
from sqlalchemy.orm import Session
from acrossmedia.models.admin import Admin, AdminRole
from acrossmedia.models.project import Project
from acrossmedia.models.video import Video
from acrossmedia.schemas.dashboard import ActivityItem, DashboardResponse, MonthlyAnalytics

MONTH_NAMES = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]
RECENT_PER_KIND = 5
ANALYTICS_MONTHS = 6


def _plural(n: int, unit: str) -> str:
    return f"{n} {unit}{'s' if n > 1 else ''} ago"


def format_relative_time(when: datetime, now: datetime) -> str:
    seconds = int((now - when).total_seconds())
    if seconds < 60:
        return "Just now"
    if seconds < 3600:
        return _plural(seconds // 60, "minute")
    if seconds < 86400:
        return _plural(seconds // 3600, "hour")
    return _plural(seconds // 86400, "day")


def last_months(now: datetime, count: int = ANALYTICS_MONTHS) -> list[tuple[int, int]]:
    """(year, month) pairs for the last `count` months, oldest first, current month last."""
    months = []
    year, month = now.year, now.month
    for _ in range(count):
        months.append((year, month))
        month -= 1
        if month == 0:
            year, month = year - 1, 12
    return list(reversed(months))


def recent_activity(db: Session, now: datetime) -> list[ActivityItem]:
    videos = db.query(Video).order_by(Video.created_at.desc()).limit(RECENT_PER_KIND).all()
    projects = db.query(Project).order_by(Project.created_at.desc()).limit(RECENT_PER_KIND).all()
    items = [
        ActivityItem(
            id=v.id,
            type="video",
            title=f'New video added: "{v.title}"',
            time=format_relative_time(v.created_at, now),
            created_at=v.created_at,
        )
        for v in videos
    ] + [
        ActivityItem(
            id=p.id,
            type="project",
            title=f'Project created: "{p.title}"',
            time=format_relative_time(p.created_at, now),
            created_at=p.created_at,
        )
        for p in projects
    ]
    items.sort(key=lambda item: item.created_at, reverse=True)
    return items


def monthly_analytics(db: Session, now: datetime) -> list[MonthlyAnalytics]:
    """Videos created per month and their views. Months without videos are reported as zero."""
    months = last_months(now)
    first_year, first_month = months[0]
    since = datetime(first_year, first_month, 1)
    buckets = {key: [0, 0] for key in months}
    rows = db.query(Video.created_at, Video.views).filter(Video.created_at >= since).all()
    for created_at, views in rows:
        key = (created_at.year, created_at.month)
        if key in buckets:
            buckets[key][0] += 1
            buckets[key][1] += views or 0
    return [
        MonthlyAnalytics(month=MONTH_NAMES[month - 1], year=year, videos=count, views=views)
        for (year, month), (count, views) in buckets.items()
    ]


def build_dashboard(db: Session, now: datetime | None = None) -> DashboardResponse:
    now = now or datetime.utcnow()
    return DashboardResponse(
        total_videos=db.query(Video).count(),
        total_projects=db.query(Project).count(),
        total_users=db.query(Admin).count(),
        pending_users=db.query(Admin).filter(Admin.role == AdminRole.PENDING.value).count(),
        total_views=db.query(func.coalesce(func.sum(Video.views), 0)).scalar() or 0,
        recent_activity=recent_activity(db, now),
        analytics=monthly_analytics(db, now),
    )

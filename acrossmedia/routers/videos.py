"""
Videos shown on the public site. Listing and detail are public; create/update/delete need an admin.
"""
import logging
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from acrossmedia.auth import get_current_admin_user
from acrossmedia.database import get_db
from acrossmedia.models.admin import Admin
from acrossmedia.models.video import Video
from acrossmedia.schemas.common import MessageResponse, Pagination
from acrossmedia.schemas.video import VideoCreate, VideoListResponse, VideoResponse, VideoUpdate
from acrossmedia.utils.query import equals_filter, paginate, search_filter, validate_id

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/videos", tags=["videos"])

SORT_ORDERS = {
    "newest": (Video.created_at.desc(),),
    "oldest": (Video.created_at.asc(),),
    "popular": (Video.views.desc(), Video.created_at.desc()),
    "title": (Video.title.asc(),),
}


def _to_response(v: Video) -> VideoResponse:
    return VideoResponse(
        id=v.id,
        title=v.title,
        url=v.url,
        description=v.description,
        keywords=v.keywords or [],
        category=v.category,
        duration=v.duration,
        uploader=v.uploader,
        views=v.views or 0,
        status=v.status,
        created_by=v.created_by_id,
        updated_by=v.updated_by_id,
        created_at=v.created_at,
        updated_at=v.updated_at,
    )


def _get_video_or_404(db: Session, video_id: str) -> Video:
    video = db.query(Video).filter(Video.id == validate_id(video_id, "video")).first()
    if not video:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Video not found")
    return video


@router.get("", response_model=VideoListResponse)
def list_videos(
    page: int = Query(1, ge=1),
    limit: int = Query(12, ge=1, le=100),
    search: str | None = None,
    category: str | None = None,
    sort: str = "newest",
    db: Session = Depends(get_db),
):
    """Public: paginated videos. Search matches title, description or uploader; unknown sort = newest."""
    q = db.query(Video)
    q = search_filter(q, search, Video.title, Video.description, Video.uploader)
    q = equals_filter(q, Video.category, category)
    q = q.order_by(*SORT_ORDERS.get(sort, SORT_ORDERS["newest"]))
    videos, total = paginate(q, page, limit)
    return VideoListResponse(
        videos=[_to_response(v) for v in videos],
        pagination=Pagination.build(page, limit, total),
    )


@router.post("", response_model=VideoResponse, status_code=status.HTTP_201_CREATED)
def create_video(
    body: VideoCreate,
    admin: Admin = Depends(get_current_admin_user),
    db: Session = Depends(get_db),
):
    video = Video(
        title=body.title,
        url=body.url,
        description=body.description,
        keywords=body.keywords,
        category=body.category,
        duration=body.duration or "N/A",
        uploader=body.uploader or "Admin",
        views=0,
        status="published",
        created_by_id=admin.id,
    )
    db.add(video)
    db.commit()
    db.refresh(video)
    logger.info("Video %s created by %s", video.id, admin.username)
    return _to_response(video)


@router.get("/{video_id}", response_model=VideoResponse)
def get_video(video_id: str, db: Session = Depends(get_db)):
    return _to_response(_get_video_or_404(db, video_id))


@router.put("/{video_id}", response_model=VideoResponse)
def update_video(
    video_id: str,
    body: VideoUpdate,
    admin: Admin = Depends(get_current_admin_user),
    db: Session = Depends(get_db),
):
    video = _get_video_or_404(db, video_id)
    video.title = body.title
    video.url = body.url
    video.description = body.description
    video.keywords = body.keywords
    video.category = body.category
    video.duration = body.duration or video.duration
    video.uploader = body.uploader or video.uploader
    video.updated_by_id = admin.id
    db.commit()
    db.refresh(video)
    return _to_response(video)


@router.delete("/{video_id}", response_model=MessageResponse)
def delete_video(
    video_id: str,
    admin: Admin = Depends(get_current_admin_user),
    db: Session = Depends(get_db),
):
    video = _get_video_or_404(db, video_id)
    db.delete(video)
    db.commit()
    logger.info("Video %s deleted by %s", video_id, admin.username)
    return MessageResponse(message="Video deleted successfully")


@router.post("/{video_id}/view")
def record_view(video_id: str, db: Session = Depends(get_db)):
    """Public: count one play of the video."""
    video = _get_video_or_404(db, video_id)
    db.query(Video).filter(Video.id == video.id).update(
        {Video.views: Video.views + 1}, synchronize_session=False
    )
    db.commit()
    db.refresh(video)
    return {"id": video.id, "views": video.views}

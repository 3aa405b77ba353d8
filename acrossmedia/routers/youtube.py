from fastapi import APIRouter, Depends
from acrossmedia.config import Settings, get_settings
from acrossmedia.schemas.youtube import YouTubeVideo
from acrossmedia.services.youtube import fetch_video

router = APIRouter(prefix="/api/youtube", tags=["youtube"])


@router.get("/video/{video_id}", response_model=YouTubeVideo)
async def get_youtube_video(video_id: str, settings: Settings = Depends(get_settings)):
    """Title, thumbnail, duration and view count for a YouTube video id."""
    return await fetch_video(video_id, settings)

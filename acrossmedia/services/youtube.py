"""
YouTube Data API lookups used by the admin panel to prefill video forms.
"""
import logging
import re
from decimal import ROUND_HALF_UP, Decimal
import httpx
from fastapi import HTTPException, status
from acrossmedia.config import Settings, get_settings
from acrossmedia.schemas.youtube import YouTubeVideo

logger = logging.getLogger(__name__)

YOUTUBE_VIDEOS_URL = "https://www.googleapis.com/youtube/v3/videos"
_DURATION_RE = re.compile(r"PT(?:(\d+)H)?(?:(\d+)M)?(?:(\d+)S)?")


def format_duration(iso_duration: str | None) -> str:
    """PT1H2M3S -> 1:02:03, PT4M5S -> 4:05. Unparseable -> 0:00."""
    match = _DURATION_RE.match(iso_duration or "")
    if not match:
        return "0:00"
    hours, minutes, seconds = (int(part or 0) for part in match.groups())
    if hours > 0:
        return f"{hours}:{minutes:02d}:{seconds:02d}"
    return f"{minutes}:{seconds:02d}"


def _round_half_up(value: Decimal, places: str) -> Decimal:
    return value.quantize(Decimal(places), rounding=ROUND_HALF_UP)


def format_views(view_count) -> str:
    """1250000 -> 1.3M, 12500 -> 13K. Halves round up."""
    try:
        num = int(view_count)
    except (TypeError, ValueError):
        return "0"
    if num >= 1_000_000:
        return f"{_round_half_up(Decimal(num) / 1_000_000, '0.1')}M"
    if num >= 1_000:
        return f"{_round_half_up(Decimal(num) / 1_000, '1')}K"
    return str(num)


def parse_video_item(item: dict) -> YouTubeVideo:
    snippet = item.get("snippet") or {}
    thumbnails = snippet.get("thumbnails") or {}
    thumbnail = (thumbnails.get("high") or thumbnails.get("default") or {}).get("url")
    return YouTubeVideo(
        title=snippet.get("title", ""),
        description=snippet.get("description", ""),
        thumbnail=thumbnail,
        duration=format_duration((item.get("contentDetails") or {}).get("duration")),
        views=format_views((item.get("statistics") or {}).get("viewCount")),
        published_at=snippet.get("publishedAt"),
        channel_title=snippet.get("channelTitle"),
    )


async def fetch_video(
    video_id: str,
    settings: Settings | None = None,
    client: httpx.AsyncClient | None = None,
) -> YouTubeVideo:
    settings = settings or get_settings()
    if not settings.youtube_api_key:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="YouTube API key not configured",
        )

    params = {
        "part": "snippet,statistics,contentDetails",
        "id": video_id,
        "key": settings.youtube_api_key,
    }
    try:
        if client is None:
            async with httpx.AsyncClient(timeout=10.0) as owned:
                res = await owned.get(YOUTUBE_VIDEOS_URL, params=params)
        else:
            res = await client.get(YOUTUBE_VIDEOS_URL, params=params)
    except httpx.HTTPError as e:
        logger.error("YouTube API request failed: %s", e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch video data",
        )

    if res.status_code != 200:
        logger.error("YouTube API returned %s for %s", res.status_code, video_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch video data",
        )

    items = res.json().get("items") or []
    if not items:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Video not found")
    return parse_video_item(items[0])

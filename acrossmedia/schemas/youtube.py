from acrossmedia.schemas.common import CamelModel


class YouTubeVideo(CamelModel):
    title: str
    description: str
    thumbnail: str | None = None
    duration: str
    views: str
    published_at: str | None = None
    channel_title: str | None = None

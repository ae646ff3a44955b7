"""Versioned video catalog document stored in the remote snippet store."""

from datetime import datetime, timezone

from pydantic import BaseModel, Field

CATALOG_VERSION = "1.0"


class CatalogVideo(BaseModel):
    video_id: str
    title: str = ""
    tags: list[str] = Field(default_factory=list)
    category_id: str = ""
    view_count: int = 0
    like_count: int = 0
    comment_count: int = 0
    published_at: datetime | None = None
    thumbnail: str = ""
    privacy_status: str = "unknown"


class CatalogDocument(BaseModel):
    version: str = CATALOG_VERSION
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    total_videos: int = 0
    videos: list[CatalogVideo] = Field(default_factory=list)

    @classmethod
    def from_videos(cls, videos: list[CatalogVideo]) -> "CatalogDocument":
        return cls(total_videos=len(videos), videos=videos)


class GistInfo(BaseModel):
    id: str
    url: str = ""
    raw_url: str = ""
    filename: str = ""


class CatalogRequest(BaseModel):
    """Body for POST /api/video-cache/generate."""

    access_token: str = Field(min_length=1)
    channel_id: str = Field(min_length=1)
    gist_token: str | None = None
    gist_id: str | None = None

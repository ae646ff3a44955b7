"""Video provider adapters (YouTube Data + Analytics APIs)."""

from vca.youtube.provider import (
    MAX_PAGE_SIZE,
    GoogleVideoProvider,
    PlaylistPage,
    SearchHit,
    SearchPage,
    VideoProvider,
    VideoStatistics,
    parse_video_item,
)

__all__ = [
    "MAX_PAGE_SIZE",
    "GoogleVideoProvider",
    "PlaylistPage",
    "SearchHit",
    "SearchPage",
    "VideoProvider",
    "VideoStatistics",
    "parse_video_item",
]

"""Video provider boundary: YouTube Data API v3 + YouTube Analytics API v2.

Everything above this module talks to the ``VideoProvider`` protocol. The
Google implementation runs the blocking ``googleapiclient`` requests in a
worker thread and translates ``HttpError`` into the ``vca.errors`` taxonomy.
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Protocol, runtime_checkable

from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from tenacity import retry, retry_if_exception, stop_after_attempt, wait_exponential_jitter

from vca.analytics.models import AnalyticsReport, ContentItem, Visibility
from vca.errors import ChannelNotFoundError, ProviderError, QuotaExhaustedError

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 50  # provider maximum for search / playlistItems / videos.list ids

_QUOTA_REASONS = {"quotaExceeded", "dailyLimitExceeded", "rateLimitExceeded", "userRateLimitExceeded"}
_TRANSIENT_STATUSES = {500, 502, 503, 504}


@dataclass
class SearchHit:
    video_id: str
    channel_id: str | None = None


@dataclass
class SearchPage:
    hits: list[SearchHit] = field(default_factory=list)
    next_page_token: str | None = None


@dataclass
class PlaylistPage:
    video_ids: list[str] = field(default_factory=list)
    next_page_token: str | None = None


@dataclass
class VideoStatistics:
    category_id: str = ""
    view_count: int = 0
    like_count: int = 0
    comment_count: int = 0


@runtime_checkable
class VideoProvider(Protocol):
    """Async surface the discovery, chunker and catalog code depends on."""

    async def search_page(
        self, channel_id: str, keyword: str, page_token: str | None = None, page_size: int = MAX_PAGE_SIZE
    ) -> SearchPage: ...

    async def uploads_playlist_id(self, channel_id: str) -> str: ...

    async def playlist_page(
        self, playlist_id: str, page_token: str | None = None, page_size: int = MAX_PAGE_SIZE
    ) -> PlaylistPage: ...

    async def video_details(self, video_ids: list[str]) -> list[ContentItem]: ...

    async def video_statistics(self, video_ids: list[str]) -> dict[str, VideoStatistics]: ...

    async def channel_country(self, channel_id: str) -> str: ...

    async def query_analytics(
        self,
        channel_id: str,
        start_date: date,
        end_date: date,
        metrics: list[str],
        video_ids: list[str],
    ) -> AnalyticsReport: ...


# ---------------------------------------------------------------------------
# Response parsing
# ---------------------------------------------------------------------------

def parse_video_item(video: dict[str, Any]) -> ContentItem:
    """Build a ContentItem from a videos.list resource (snippet + status parts)."""
    snippet = video.get("snippet") or {}
    status = video.get("status") or {}
    thumbnails = snippet.get("thumbnails") or {}
    privacy = status.get("privacyStatus") or "public"
    try:
        visibility = Visibility(privacy)
    except ValueError:
        visibility = Visibility.PUBLIC
    published = snippet.get("publishedAt")
    return ContentItem(
        item_id=video["id"],
        title=snippet.get("title") or "",
        description=snippet.get("description") or "",
        tags=tuple(snippet.get("tags") or ()),
        published_at=datetime.fromisoformat(published.replace("Z", "+00:00")) if published else None,
        visibility=visibility,
        thumbnail_url=(thumbnails.get("medium") or thumbnails.get("default") or {}).get("url", ""),
    )


def _error_reason(error: HttpError) -> str:
    try:
        payload = json.loads(error.content.decode("utf-8"))
        errors = payload.get("error", {}).get("errors") or [{}]
        return errors[0].get("reason", "") or ""
    except (ValueError, AttributeError):
        return ""


def _status(error: HttpError) -> int:
    return int(getattr(error.resp, "status", 0) or 0)


def is_quota_error(error: HttpError) -> bool:
    if _status(error) == 429 or _error_reason(error) in _QUOTA_REASONS:
        return True
    return "quota" in str(error).lower()


def _is_transient(exc: BaseException) -> bool:
    return isinstance(exc, HttpError) and _status(exc) in _TRANSIENT_STATUSES


def translate_http_error(error: HttpError) -> ProviderError:
    if is_quota_error(error):
        return QuotaExhaustedError()
    return ProviderError(f"Video API error {_status(error)}: {_error_reason(error) or error}")


@retry(
    retry=retry_if_exception(_is_transient),
    stop=stop_after_attempt(3),
    wait=wait_exponential_jitter(initial=1, max=8),
    reraise=True,
)
def _execute(request: Any) -> dict[str, Any]:
    return request.execute()


# ---------------------------------------------------------------------------
# Google implementation
# ---------------------------------------------------------------------------

class GoogleVideoProvider:
    """VideoProvider backed by googleapiclient discovery clients."""

    def __init__(self, youtube: Any, youtube_analytics: Any):
        self._youtube = youtube
        self._analytics = youtube_analytics

    @classmethod
    def from_access_token(cls, access_token: str) -> "GoogleVideoProvider":
        creds = Credentials(token=access_token)
        return cls(
            build("youtube", "v3", credentials=creds, cache_discovery=False),
            build("youtubeAnalytics", "v2", credentials=creds, cache_discovery=False),
        )

    async def _call(self, request: Any) -> dict[str, Any]:
        try:
            return await asyncio.to_thread(_execute, request)
        except HttpError as e:
            raise translate_http_error(e) from e

    async def search_page(
        self, channel_id: str, keyword: str, page_token: str | None = None, page_size: int = MAX_PAGE_SIZE
    ) -> SearchPage:
        data = await self._call(
            self._youtube.search().list(
                part="id,snippet",
                forMine=True,
                type="video",
                maxResults=min(page_size, MAX_PAGE_SIZE),
                order="date",
                q=keyword,
                pageToken=page_token,
            )
        )
        hits = [
            SearchHit(
                video_id=item["id"]["videoId"],
                channel_id=(item.get("snippet") or {}).get("channelId"),
            )
            for item in data.get("items") or []
            if (item.get("id") or {}).get("videoId")
        ]
        return SearchPage(hits=hits, next_page_token=data.get("nextPageToken"))

    async def uploads_playlist_id(self, channel_id: str) -> str:
        data = await self._call(self._youtube.channels().list(part="contentDetails", id=channel_id))
        items = data.get("items") or []
        if not items:
            raise ChannelNotFoundError(f"Channel not found: {channel_id}")
        return items[0]["contentDetails"]["relatedPlaylists"]["uploads"]

    async def playlist_page(
        self, playlist_id: str, page_token: str | None = None, page_size: int = MAX_PAGE_SIZE
    ) -> PlaylistPage:
        data = await self._call(
            self._youtube.playlistItems().list(
                part="snippet",
                playlistId=playlist_id,
                maxResults=min(page_size, MAX_PAGE_SIZE),
                pageToken=page_token,
            )
        )
        ids = [
            item["snippet"]["resourceId"]["videoId"]
            for item in data.get("items") or []
            if ((item.get("snippet") or {}).get("resourceId") or {}).get("videoId")
        ]
        return PlaylistPage(video_ids=ids, next_page_token=data.get("nextPageToken"))

    async def video_details(self, video_ids: list[str]) -> list[ContentItem]:
        if not video_ids:
            return []
        data = await self._call(self._youtube.videos().list(part="snippet,status", id=",".join(video_ids)))
        return [parse_video_item(v) for v in data.get("items") or []]

    async def video_statistics(self, video_ids: list[str]) -> dict[str, VideoStatistics]:
        if not video_ids:
            return {}
        data = await self._call(
            self._youtube.videos().list(part="snippet,statistics", id=",".join(video_ids), maxResults=MAX_PAGE_SIZE)
        )
        out: dict[str, VideoStatistics] = {}
        for video in data.get("items") or []:
            stats = video.get("statistics") or {}
            out[video["id"]] = VideoStatistics(
                category_id=(video.get("snippet") or {}).get("categoryId", ""),
                view_count=int(stats.get("viewCount", 0) or 0),
                like_count=int(stats.get("likeCount", 0) or 0),
                comment_count=int(stats.get("commentCount", 0) or 0),
            )
        return out

    async def channel_country(self, channel_id: str) -> str:
        data = await self._call(self._youtube.channels().list(part="snippet", id=channel_id))
        items = data.get("items") or []
        if not items:
            return "Unknown"
        return items[0].get("snippet", {}).get("country") or "Unknown"

    async def query_analytics(
        self,
        channel_id: str,
        start_date: date,
        end_date: date,
        metrics: list[str],
        video_ids: list[str],
    ) -> AnalyticsReport:
        data = await self._call(
            self._analytics.reports().query(
                ids=f"channel=={channel_id}",
                startDate=start_date.isoformat(),
                endDate=end_date.isoformat(),
                metrics=",".join(metrics),
                filters=f"video=={','.join(video_ids)}",
            )
        )
        headers = [h.get("name", "") for h in data.get("columnHeaders") or []]
        return AnalyticsReport(column_names=headers or list(metrics), rows=data.get("rows") or [])

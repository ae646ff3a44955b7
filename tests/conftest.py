"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import json
from collections import Counter
from datetime import date
from typing import Any

import httpx
import pytest

from vca.analytics.models import AnalyticsReport, ContentItem
from vca.youtube.provider import PlaylistPage, SearchHit, SearchPage, VideoStatistics

CHANNEL_ID = "UC_test_channel"
GIST_FILENAME = "youtube-videos-cache.json"


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeVideoProvider:
    """In-memory VideoProvider.

    ``metrics`` maps video id -> {"views": .., "averageViewPercentage": .., ...}.
    ``search_index`` maps keyword -> video ids returned by targeted search;
    keywords missing from it return no hits.
    """

    def __init__(
        self,
        videos: list[ContentItem] | None = None,
        metrics: dict[str, dict[str, float]] | None = None,
        search_index: dict[str, list[str]] | None = None,
        country: str = "TW",
    ):
        self.videos = {v.item_id: v for v in videos or []}
        self.metrics = metrics or {}
        self.search_index = search_index or {}
        self.country = country
        self.calls: Counter = Counter()
        self.analytics_queries: list[tuple[date, date, list[str]]] = []
        self.search_error: Exception | None = None
        self.country_error: Exception | None = None
        # start_date -> exception raised by query_analytics for that range
        self.analytics_errors: dict[date, Exception] = {}
        self.foreign_hits: list[str] = []
        self.missing_details: set[str] = set()

    async def search_page(self, channel_id, keyword, page_token=None, page_size=50):
        self.calls["search"] += 1
        if self.search_error is not None:
            raise self.search_error
        ids = list(self.search_index.get(keyword, []))
        start = int(page_token or 0)
        page = ids[start : start + page_size]
        hits = [SearchHit(video_id=i, channel_id=channel_id) for i in page]
        hits += [SearchHit(video_id=i, channel_id="UC_other") for i in self.foreign_hits if start == 0]
        end = start + page_size
        return SearchPage(hits=hits, next_page_token=str(end) if end < len(ids) else None)

    async def uploads_playlist_id(self, channel_id):
        self.calls["uploads_playlist_id"] += 1
        return f"UU{channel_id}"

    async def playlist_page(self, playlist_id, page_token=None, page_size=50):
        self.calls["playlist_page"] += 1
        ids = list(self.videos)
        start = int(page_token or 0)
        end = start + page_size
        return PlaylistPage(video_ids=ids[start:end], next_page_token=str(end) if end < len(ids) else None)

    async def video_details(self, video_ids):
        self.calls["video_details"] += 1
        return [self.videos[i] for i in video_ids if i in self.videos and i not in self.missing_details]

    async def video_statistics(self, video_ids):
        self.calls["video_statistics"] += 1
        return {
            i: VideoStatistics(category_id="28", view_count=int(self.metrics.get(i, {}).get("views", 0)))
            for i in video_ids
            if i in self.videos
        }

    async def channel_country(self, channel_id):
        self.calls["channel_country"] += 1
        if self.country_error is not None:
            raise self.country_error
        return self.country

    async def query_analytics(self, channel_id, start_date, end_date, metrics, video_ids):
        self.calls["query_analytics"] += 1
        self.analytics_queries.append((start_date, end_date, list(video_ids)))
        if start_date in self.analytics_errors:
            raise self.analytics_errors[start_date]
        rows = [self.metrics[i] for i in video_ids if i in self.metrics]
        if not rows:
            return AnalyticsReport(column_names=list(metrics), rows=[])
        views = sum(r.get("views", 0) for r in rows)
        values: list[float] = []
        for name in metrics:
            if name.startswith("average"):
                values.append(sum(r.get("views", 0) * r.get(name, 0) for r in rows) / views if views else 0)
            else:
                values.append(sum(r.get(name, 0) for r in rows))
        return AnalyticsReport(column_names=list(metrics), rows=[values])


class FakeLLM:
    """LLMProvider double returning a canned structured response."""

    def __init__(self, payload: dict[str, Any] | None = None, error: Exception | None = None):
        self.payload = payload or {
            "title_a": "Result first",
            "title_b": "Pain point",
            "title_c": "Trend",
            "article_text": "## Intro\n\nBody",
            "seo_description": "Short SEO text",
            "screenshots": [{"timestamp": "01:23", "reason": "Key step"}],
        }
        self.error = error
        self.prompts: list[str] = []

    def complete(self, prompt: str, **kwargs: Any) -> str:
        self.prompts.append(prompt)
        return ""

    def complete_structured(self, prompt, schema, **kwargs):
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return schema.model_validate(self.payload)


class GistServer:
    """Minimal in-memory stand-in for the GitHub gists endpoints."""

    def __init__(self):
        self.gists: dict[str, dict] = {}
        self.requests: list[httpx.Request] = []
        self.truncate = False

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if path.startswith("/raw/"):
            return httpx.Response(200, text=self.gists[path.split("/")[2]]["content"])
        if request.method == "POST" and path == "/gists":
            return self._store("g1", request)
        gist_id = path.rsplit("/", 1)[-1]
        if gist_id not in self.gists:
            return httpx.Response(404, json={"message": "Not Found"})
        if request.method == "PATCH":
            return self._store(gist_id, request)
        content = self.gists[gist_id]["content"]
        file_info = {"raw_url": f"https://gist.githubusercontent.com/raw/{gist_id}/{GIST_FILENAME}"}
        if self.truncate:
            file_info.update(truncated=True, content=content[:10])
        else:
            file_info.update(truncated=False, content=content)
        return httpx.Response(200, json={"id": gist_id, "files": {GIST_FILENAME: file_info}})

    def _store(self, gist_id, request):
        body = json.loads(request.content)
        self.gists[gist_id] = {"content": body["files"][GIST_FILENAME]["content"]}
        return httpx.Response(
            201 if request.method == "POST" else 200,
            json={
                "id": gist_id,
                "html_url": f"https://gist.github.com/{gist_id}",
                "files": {GIST_FILENAME: {"raw_url": f"https://gist.githubusercontent.com/raw/{gist_id}/{GIST_FILENAME}"}},
            },
        )


def make_video(item_id: str, title: str = "", tags: tuple[str, ...] = (), description: str = "") -> ContentItem:
    return ContentItem(item_id=item_id, title=title or f"Video {item_id}", tags=tags, description=description)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def videos() -> list[ContentItem]:
    return [
        make_video("v1", "Unboxing the X200 phone", tags=("phone", "unboxing")),
        make_video("v2", "Laptop review", tags=("laptop",)),
        make_video("v3", "Phone camera tips", description="Night mode on the X200"),
        make_video("v4", "Studio vlog"),
    ]


@pytest.fixture
def provider(videos) -> FakeVideoProvider:
    return FakeVideoProvider(
        videos=videos,
        metrics={
            "v1": {"views": 10, "averageViewPercentage": 50, "averageViewDuration": 60, "likes": 1},
            "v2": {"views": 30, "averageViewPercentage": 70, "averageViewDuration": 120, "likes": 3},
            "v3": {"views": 20, "averageViewPercentage": 40, "averageViewDuration": 30, "likes": 2},
        },
        search_index={"phone": ["v1", "v3"]},
    )

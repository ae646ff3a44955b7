"""Build a full-channel video catalog with statistics."""

from __future__ import annotations

import logging
import re
from typing import Callable

from vca.analytics.chunker import chunk_ids
from vca.analytics.discovery import ContentDiscovery, dedupe_items
from vca.catalog.models import CatalogDocument, CatalogVideo
from vca.quota.ledger import QUOTA_COST, QuotaLedger
from vca.youtube.provider import MAX_PAGE_SIZE, VideoProvider

logger = logging.getLogger(__name__)

_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F-\x9F]")
_WHITESPACE = re.compile(r"\s+")


def sanitize_text(text: str | None) -> str:
    """Drop control characters and collapse whitespace runs to single spaces."""
    if not text or not isinstance(text, str):
        return ""
    return _WHITESPACE.sub(" ", _CONTROL_CHARS.sub("", text)).strip()


async def build_catalog(
    provider: VideoProvider,
    ledger: QuotaLedger,
    scope_id: str,
    on_progress: Callable[[int, str], None] | None = None,
    *,
    discovery: ContentDiscovery | None = None,
) -> CatalogDocument:
    def report(percent: int, message: str) -> None:
        if on_progress is not None:
            on_progress(percent, message)

    discovery = discovery or ContentDiscovery(provider, ledger)
    report(5, "Listing channel uploads")
    items = dedupe_items(await discovery.enumerate_all(scope_id))
    logger.info("Building catalog for %s: %d videos", scope_id, len(items))

    batches = chunk_ids([item.item_id for item in items], MAX_PAGE_SIZE)
    stats = {}
    for index, batch in enumerate(batches, start=1):
        report(10 + 80 * (index - 1) // max(len(batches), 1), f"Fetching statistics {index}/{len(batches)}")
        stats.update(await provider.video_statistics(batch))
        ledger.record(
            "youtube.videos.list",
            QUOTA_COST["videos_list_part"] * 2,
            {"part": "snippet,statistics", "batch": index, "ids": len(batch), "context": "catalog:statistics"},
        )

    videos: list[CatalogVideo] = []
    for item in items:
        stat = stats.get(item.item_id)
        if stat is None:
            logger.warning("No statistics for video %s", item.item_id)
        videos.append(
            CatalogVideo(
                video_id=item.item_id,
                title=sanitize_text(item.title),
                tags=[sanitize_text(tag) for tag in item.tags],
                category_id=stat.category_id if stat else "",
                view_count=stat.view_count if stat else 0,
                like_count=stat.like_count if stat else 0,
                comment_count=stat.comment_count if stat else 0,
                published_at=item.published_at,
                thumbnail=item.thumbnail_url,
                privacy_status=item.visibility.value,
            )
        )

    report(90, "Catalog built")
    return CatalogDocument.from_videos(videos)


def search_catalog(doc: CatalogDocument, query: str = "", max_results: int = 10) -> list[CatalogVideo]:
    """Case-insensitive title/tag substring search; empty query returns the first ``max_results``."""
    needle = (query or "").strip().lower()
    if not needle:
        return doc.videos[:max_results]
    matched = [
        v for v in doc.videos if needle in v.title.lower() or any(needle in tag.lower() for tag in v.tags)
    ]
    return matched[:max_results]

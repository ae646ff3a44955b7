"""Content discovery: targeted search first, full uploads enumeration as fallback.

Search costs 100 quota units per page but is precise; enumerating the uploads
playlist costs 2 units per page plus a details lookup, but needs one page per
50 videos. Discovery always produces a result: a failing or empty search falls
back to enumeration with the keyword applied locally.
"""

from __future__ import annotations

import logging
from typing import Iterable

from vca.analytics.models import ContentItem
from vca.quota.ledger import QUOTA_COST, QuotaLedger
from vca.youtube.provider import MAX_PAGE_SIZE, VideoProvider

logger = logging.getLogger(__name__)

DEFAULT_MAX_PAGES = 400
DEFAULT_MAX_ITEMS = 10_000


def matches_keyword(item: ContentItem, keyword: str) -> bool:
    """Case-insensitive substring match over title, description and tags."""
    needle = keyword.strip().lower()
    if not needle:
        return True
    if needle in item.title.lower() or needle in item.description.lower():
        return True
    return any(needle in tag.lower() for tag in item.tags)


def filter_by_keyword(items: Iterable[ContentItem], keyword: str) -> list[ContentItem]:
    return [item for item in items if matches_keyword(item, keyword)]


def dedupe_items(items: Iterable[ContentItem]) -> list[ContentItem]:
    """Keep the first occurrence of each item id, preserving order."""
    seen: set[str] = set()
    unique: list[ContentItem] = []
    for item in items:
        if item.item_id in seen:
            continue
        seen.add(item.item_id)
        unique.append(item)
    return unique


class ContentDiscovery:
    def __init__(
        self,
        provider: VideoProvider,
        ledger: QuotaLedger,
        *,
        page_size: int = MAX_PAGE_SIZE,
        max_pages: int = DEFAULT_MAX_PAGES,
        max_items: int = DEFAULT_MAX_ITEMS,
    ):
        self._provider = provider
        self._ledger = ledger
        self._page_size = min(page_size, MAX_PAGE_SIZE)
        self._max_pages = max_pages
        self._max_items = max_items

    async def discover(self, scope_id: str, keyword: str = "") -> list[ContentItem]:
        """Resolve the videos of ``scope_id`` matching ``keyword`` (all videos if empty)."""
        keyword = (keyword or "").strip()

        if keyword:
            try:
                found = await self.search(scope_id, keyword)
                if found:
                    logger.info("Search found %d videos for keyword %r", len(found), keyword)
                    return dedupe_items(found)
                logger.info("Search found nothing for %r, falling back to full enumeration", keyword)
            except Exception as e:
                logger.warning("Search failed (%s), falling back to full enumeration", e)

        all_items = await self.enumerate_all(scope_id)
        if not keyword:
            return dedupe_items(all_items)

        filtered = filter_by_keyword(all_items, keyword)
        logger.info(
            "Keyword %r matched %d of %d videos after local filtering",
            keyword,
            len(filtered),
            len(all_items),
        )
        return dedupe_items(filtered)

    async def search(self, scope_id: str, keyword: str) -> list[ContentItem]:
        """Page through targeted search results, fetching details once per page."""
        items: list[ContentItem] = []
        seen: set[str] = set()
        page_token: str | None = None
        page = 0

        while True:
            page += 1
            result = await self._provider.search_page(scope_id, keyword, page_token, self._page_size)
            self._ledger.record(
                "youtube.search.list",
                QUOTA_COST["search_list"],
                {"keyword": keyword, "page": page, "context": "discovery:search"},
            )
            if not result.hits:
                break

            ids: list[str] = []
            for hit in result.hits:
                if hit.video_id in seen:
                    continue
                # forMine search can surface other channels' videos
                if hit.channel_id and hit.channel_id != scope_id:
                    continue
                seen.add(hit.video_id)
                ids.append(hit.video_id)

            if ids:
                details = await self._fetch_details(ids, context="discovery:search:details")
                for item in details:
                    items.append(item)
                    if len(items) >= self._max_items:
                        logger.info("Search reached max items (%d), stopping", self._max_items)
                        return items

            page_token = result.next_page_token
            if not page_token:
                break
            if page >= self._max_pages:
                logger.warning("Search reached page ceiling (%d pages), stopping", self._max_pages)
                break

        return items

    async def enumerate_all(self, scope_id: str) -> list[ContentItem]:
        """Walk the channel's uploads playlist forward, page by page."""
        playlist_id = await self._provider.uploads_playlist_id(scope_id)
        self._ledger.record(
            "youtube.channels.list",
            QUOTA_COST["channels_list"],
            {"part": "contentDetails", "context": "discovery:enumerate"},
        )

        items: list[ContentItem] = []
        page_token: str | None = None
        page = 0

        while True:
            page += 1
            result = await self._provider.playlist_page(playlist_id, page_token, self._page_size)
            self._ledger.record(
                "youtube.playlistItems.list",
                QUOTA_COST["playlist_items_list"],
                {"page": page, "context": "discovery:enumerate"},
            )
            if not result.video_ids:
                break

            details = await self._fetch_details(result.video_ids, context="discovery:enumerate:details")
            skipped = len(result.video_ids) - len(details)
            if skipped > 0:
                logger.warning("Skipped %d videos without readable details (deleted or restricted)", skipped)
            items.extend(details)

            if len(items) >= self._max_items:
                logger.info("Enumeration reached max items (%d), stopping", self._max_items)
                return items[: self._max_items]

            page_token = result.next_page_token
            if not page_token:
                break
            if page >= self._max_pages:
                logger.warning(
                    "Enumeration reached page ceiling (%d pages), stopping; narrow the keyword or split the query",
                    self._max_pages,
                )
                break

        logger.info("Enumerated %d videos on channel %s", len(items), scope_id)
        return items

    async def _fetch_details(self, video_ids: list[str], *, context: str) -> list[ContentItem]:
        details = await self._provider.video_details(video_ids)
        # snippet + status parts
        self._ledger.record(
            "youtube.videos.list",
            QUOTA_COST["videos_list_part"] * 2,
            {"part": "snippet,status", "ids": len(video_ids), "context": context},
        )
        return details

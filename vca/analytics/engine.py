"""Channel analytics aggregation: keyword groups x date ranges -> metrics matrix."""

from __future__ import annotations

import logging
from typing import Callable, Sequence

from vca.analytics.cache import ResultCache
from vca.analytics.chunker import DEFAULT_CHUNK_SIZE, BatchChunker
from vca.analytics.discovery import ContentDiscovery
from vca.analytics.models import (
    AggregationCell,
    AggregationMatrix,
    AnalyticsMetrics,
    DateRange,
    GroupRow,
    GroupSummary,
    KeywordGroup,
    duplicate_labels,
)
from vca.errors import QuotaExhaustedError
from vca.quota.ledger import QUOTA_COST, QuotaLedger
from vca.youtube.provider import VideoProvider

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, str], None]

# Progress bands reported through on_progress.
_DISCOVERY_START, _DISCOVERY_END = 5, 40
_CELLS_END = 95


class AggregationEngine:
    """Orchestrates discovery, chunked queries and the result cache.

    Discovery runs once per group; its id set is shared by every date range.
    A failing cell records its error and never aborts sibling cells.
    """

    def __init__(
        self,
        provider: VideoProvider,
        ledger: QuotaLedger,
        cache: ResultCache,
        *,
        discovery: ContentDiscovery | None = None,
        chunker: BatchChunker | None = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ):
        self._provider = provider
        self._ledger = ledger
        self._cache = cache
        self._discovery = discovery or ContentDiscovery(provider, ledger)
        self._chunker = chunker or BatchChunker(provider, ledger, chunk_size=chunk_size)

    async def aggregate(
        self,
        scope_id: str,
        groups: Sequence[KeywordGroup],
        date_ranges: Sequence[DateRange],
        on_progress: ProgressCallback | None = None,
    ) -> AggregationMatrix:
        def report(percent: int, message: str) -> None:
            if on_progress is not None:
                on_progress(percent, message)

        duplicates = duplicate_labels(date_ranges)
        if duplicates:
            raise ValueError(f"date range labels must be unique: {', '.join(duplicates)}")

        units_before = self._ledger.total_units()
        country = await self._channel_country(scope_id)

        # Step 1: resolve each group's video ids
        resolved: list[tuple[KeywordGroup, list[str]]] = []
        for index, group in enumerate(groups):
            label = group.keyword or "(all videos)"
            report(
                _DISCOVERY_START + (_DISCOVERY_END - _DISCOVERY_START) * index // max(len(groups), 1),
                f"Searching videos for {label}",
            )
            items = await self._discovery.discover(scope_id, group.keyword)
            resolved.append((group, [item.item_id for item in items]))
            logger.info("Group %r (%s): %d videos", group.name, label, len(items))

        # Step 2: one cell per (group, date range)
        total_cells = max(len(resolved) * len(date_ranges), 1)
        done = 0
        rows: list[GroupRow] = []
        for group, ids in resolved:
            row = GroupRow(name=group.name, keyword=group.keyword, item_count=len(ids))
            for date_range in date_ranges:
                report(
                    _DISCOVERY_END + (_CELLS_END - _DISCOVERY_END) * done // total_cells,
                    f"Querying {group.name} / {date_range.label}",
                )
                row.cells[date_range.label] = await self._cell(scope_id, group, ids, date_range)
                done += 1
            rows.append(row)

        report(_CELLS_END, "Aggregation finished")
        return AggregationMatrix(
            rows=rows,
            columns=[dr.label for dr in date_ranges],
            channel_country=country,
            groups=[
                GroupSummary(name=g.name, keyword=g.keyword or "(all videos)", item_count=len(ids))
                for g, ids in resolved
            ],
            quota_units=self._ledger.total_units() - units_before,
        )

    async def _cell(
        self,
        scope_id: str,
        group: KeywordGroup,
        ids: list[str],
        date_range: DateRange,
    ) -> AggregationCell:
        key = ResultCache.make_key(scope_id, ids, date_range.start_date, date_range.end_date)
        cached = self._cache.get(key)
        if cached is not None:
            logger.info("Using cached analytics for %s / %s", group.name, date_range.label)
            return AggregationCell(metrics=cached, item_count=len(ids))

        try:
            if ids:
                metrics = await self._chunker.aggregate_metric(scope_id, ids, date_range)
            else:
                metrics = AnalyticsMetrics()
        except QuotaExhaustedError as e:
            logger.error("Quota exhausted for %s / %s", group.name, date_range.label)
            return AggregationCell(item_count=len(ids), error=str(e), error_kind="quota_exhausted")
        except Exception as e:
            logger.exception("Analytics query failed for %s / %s", group.name, date_range.label)
            return AggregationCell(item_count=len(ids), error=str(e) or e.__class__.__name__, error_kind="provider_error")

        self._cache.set(key, metrics)
        return AggregationCell(metrics=metrics, item_count=len(ids))

    async def _channel_country(self, scope_id: str) -> str:
        try:
            country = await self._provider.channel_country(scope_id)
        except Exception as e:
            logger.warning("Channel country lookup failed: %s", e)
            return "Unknown"
        self._ledger.record(
            "youtube.channels.list",
            QUOTA_COST["channels_list"],
            {"part": "snippet", "context": "analytics:channel_country"},
        )
        return country

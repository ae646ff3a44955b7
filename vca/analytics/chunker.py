"""Split video id lists into provider-legal queries and recombine the results."""

from __future__ import annotations

import logging
from typing import Sequence

from vca.analytics.models import (
    ADDITIVE_METRICS,
    API_METRIC_NAMES,
    WEIGHTED_METRICS,
    AnalyticsMetrics,
    AnalyticsReport,
    DateRange,
)
from vca.quota.ledger import QUOTA_COST, QuotaLedger
from vca.youtube.provider import VideoProvider

logger = logging.getLogger(__name__)

# Analytics API limit on the number of ids in a `video==` filter.
DEFAULT_CHUNK_SIZE = 200

METRIC_QUERY: list[str] = list(API_METRIC_NAMES)


def chunk_ids(ids: Sequence[str], size: int) -> list[list[str]]:
    if size < 1:
        raise ValueError("chunk size must be >= 1")
    return [list(ids[i : i + size]) for i in range(0, len(ids), size)]


def metrics_from_report(report: AnalyticsReport) -> AnalyticsMetrics | None:
    """Parse the first row of a report, or None when the report has no rows."""
    if not report.rows:
        return None
    row = report.rows[0]
    values: dict[str, float] = {}
    for column, raw in zip(report.column_names, row):
        field_name = API_METRIC_NAMES.get(column)
        if field_name is not None:
            values[field_name] = raw or 0
    for name in ADDITIVE_METRICS:
        if name in values and name != "estimated_minutes_watched":
            values[name] = int(values[name])
    return AnalyticsMetrics(**values)


def combine_metrics(parts: Sequence[AnalyticsMetrics]) -> AnalyticsMetrics:
    """Sum additive metrics; views-weighted mean for duration/percentage metrics.

    Falls back to zero for weighted metrics when total views is zero.
    """
    if not parts:
        return AnalyticsMetrics()

    combined: dict[str, float] = {name: sum(getattr(p, name) for p in parts) for name in ADDITIVE_METRICS}
    total_views = combined["views"]
    for name in WEIGHTED_METRICS:
        if total_views > 0:
            combined[name] = sum(p.views * getattr(p, name) for p in parts) / total_views
        else:
            combined[name] = 0.0
    return AnalyticsMetrics(**combined)


class BatchChunker:
    def __init__(self, provider: VideoProvider, ledger: QuotaLedger, chunk_size: int = DEFAULT_CHUNK_SIZE):
        self._provider = provider
        self._ledger = ledger
        self._chunk_size = chunk_size

    async def aggregate_metric(
        self,
        scope_id: str,
        item_ids: Sequence[str],
        date_range: DateRange,
    ) -> AnalyticsMetrics:
        """Query every chunk for the same metrics and date range and combine.

        Provider errors (QuotaExhaustedError included) propagate to the caller.
        """
        chunks = chunk_ids(item_ids, self._chunk_size)
        parts: list[AnalyticsMetrics] = []
        for index, chunk in enumerate(chunks, start=1):
            report = await self._provider.query_analytics(
                scope_id,
                date_range.start_date,
                date_range.end_date,
                METRIC_QUERY,
                chunk,
            )
            self._ledger.record(
                "youtubeAnalytics.reports.query",
                QUOTA_COST["analytics_reports_query"],
                {
                    "context": "analytics:chunk",
                    "chunk": index,
                    "chunks": len(chunks),
                    "filter_videos": len(chunk),
                    "date_range": f"{date_range.start_date} ~ {date_range.end_date}",
                },
            )
            metrics = metrics_from_report(report)
            if metrics is not None:
                parts.append(metrics)

        if len(chunks) > 1:
            logger.info("Combined %d of %d chunks with data for %s", len(parts), len(chunks), date_range.label)
        return combine_metrics(parts)

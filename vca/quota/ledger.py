"""Process-wide counter of video API quota units, tagged by call site."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

# Units charged per call (YouTube Data API v3 / Analytics API v2 cost model).
QUOTA_COST: dict[str, int] = {
    "channels_list": 1,
    "playlist_items_list": 2,
    "videos_list_part": 2,
    "analytics_reports_query": 1,
    "search_list": 100,
}


class QuotaEvent(BaseModel):
    action: str
    units: int
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    details: dict[str, Any] = Field(default_factory=dict)


class QuotaSnapshot(BaseModel):
    totals: dict[str, int] = Field(default_factory=dict)
    events: list[QuotaEvent] = Field(default_factory=list)
    total_units: int = 0


class QuotaLedger:
    """Append-only log of quota charges with running totals per action.

    Recording never raises and never alters control flow; it exists so that
    cumulative external cost is observable (``GET /api/quota/server``).
    """

    def __init__(self) -> None:
        self._totals: dict[str, int] = {}
        self._events: list[QuotaEvent] = []

    def record(self, action: str, units: int, details: dict[str, Any] | None = None) -> None:
        if isinstance(units, bool) or not isinstance(units, int) or units <= 0:
            return
        self._totals[action] = self._totals.get(action, 0) + units
        self._events.append(QuotaEvent(action=action, units=units, details=dict(details or {})))
        logger.debug("Quota +%d units via %s %s", units, action, details or "")

    def snapshot(self) -> QuotaSnapshot:
        return QuotaSnapshot(
            totals=dict(self._totals),
            events=[e.model_copy() for e in self._events],
            total_units=sum(self._totals.values()),
        )

    def total_units(self) -> int:
        return sum(self._totals.values())

    def reset(self) -> None:
        self._totals.clear()
        self._events.clear()
        logger.info("Quota ledger reset")

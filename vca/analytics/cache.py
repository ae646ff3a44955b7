"""Time-boxed memoization of aggregation results."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, Iterable

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 15 * 60


@dataclass
class CacheEntry:
    data: Any
    stored_at: float


class ResultCache:
    """TTL cache keyed by (scope, item set, date range).

    An entry at or past its TTL reads as a miss. Reads never evict; ``sweep()``
    removes expired entries. There is no size bound.
    """

    def __init__(self, ttl_seconds: float = DEFAULT_TTL_SECONDS, clock: Callable[[], float] = time.monotonic):
        self._ttl = ttl_seconds
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}

    @staticmethod
    def make_key(scope_id: str, item_ids: Iterable[str], start: date | str, end: date | str) -> str:
        return f"{scope_id}:{','.join(sorted(item_ids))}:{start}:{end}"

    def get(self, key: str) -> Any | None:
        entry = self._entries.get(key)
        if entry is None or self._is_expired(entry):
            return None
        return entry.data

    def set(self, key: str, data: Any) -> None:
        self._entries[key] = CacheEntry(data=data, stored_at=self._clock())

    def sweep(self) -> int:
        expired = [key for key, entry in self._entries.items() if self._is_expired(entry)]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.info("Evicted %d expired analytics cache entries", len(expired))
        return len(expired)

    def clear(self) -> int:
        size = len(self._entries)
        self._entries.clear()
        logger.info("Cleared %d analytics cache entries", size)
        return size

    def __len__(self) -> int:
        return len(self._entries)

    def _is_expired(self, entry: CacheEntry) -> bool:
        return self._clock() - entry.stored_at >= self._ttl

"""In-memory cache store with absolute expiry and priority-aware eviction."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import timedelta
from typing import Any

from switchyard.domain.types import CachePriority

logger = logging.getLogger(__name__)


@dataclass
class _Entry:
    value: Any
    expires_at: float
    priority: CachePriority
    stored_at: float


class MemoryCacheStore:
    """Process-local :class:`~switchyard.behaviors.caching.CacheStore`.

    Parameters:
        max_entries: Capacity bound. When full, expired entries are purged
            first, then the lowest-priority, oldest entry is evicted.
            ``never_remove`` entries are never evicted; if only those
            remain, the new entry is not stored.
        clock: Monotonic time source in seconds (injectable for tests).
    """

    def __init__(
        self,
        *,
        max_entries: int | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_entries is not None and max_entries < 1:
            msg = "max_entries must be a positive integer"
            raise ValueError(msg)
        self._entries: dict[str, _Entry] = {}
        self._max_entries = max_entries
        self._clock = clock

    def try_get(self, key: str) -> tuple[Any, bool]:
        entry = self._entries.get(key)
        if entry is None:
            return None, False
        if entry.expires_at <= self._clock():
            del self._entries[key]
            return None, False
        return entry.value, True

    def set(
        self,
        key: str,
        value: Any,
        expiration: timedelta,
        priority: CachePriority = CachePriority.NORMAL,
    ) -> None:
        seconds = expiration.total_seconds()
        if seconds <= 0:
            self._entries.pop(key, None)
            return
        now = self._clock()
        if key not in self._entries and not self._make_room(now):
            logger.debug("Cache full of pinned entries; not storing %s", key)
            return
        self._entries[key] = _Entry(value, now + seconds, CachePriority(priority), now)

    def remove(self, key: str) -> bool:
        return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, str):
            return False
        return self.try_get(key)[1]

    def _make_room(self, now: float) -> bool:
        """Ensure one free slot; return False when nothing can be evicted."""
        if self._max_entries is None or len(self._entries) < self._max_entries:
            return True
        for key in [k for k, e in self._entries.items() if e.expires_at <= now]:
            del self._entries[key]
        if len(self._entries) < self._max_entries:
            return True

        candidates = [
            (entry.priority.rank, entry.stored_at, key)
            for key, entry in self._entries.items()
            if entry.priority is not CachePriority.NEVER_REMOVE
        ]
        if not candidates:
            return False
        _, _, victim = min(candidates)
        del self._entries[victim]
        logger.debug("Evicted cache entry %s", victim)
        return True

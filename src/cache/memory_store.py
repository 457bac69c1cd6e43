# src/cache/memory_store.py — v1
"""In-process response caches.

MemoryResponseCache is a bounded LRU; concurrent identical requests may both
miss and both store, last write wins. Values are deep-copied on the way in
and out so callers never share mutable results.
"""

from __future__ import annotations

import copy
import logging
from collections import OrderedDict
from typing import Any

from classboard.cache.base_cache_store import BaseResponseCache
from classboard.cache.models import CacheStats

logger = logging.getLogger(__name__)


class MemoryResponseCache(BaseResponseCache):
    """LRU cache held in process memory. ``max_entries=0`` means unbounded."""

    def __init__(self, max_entries: int = 1024) -> None:
        if max_entries < 0:
            raise ValueError("max_entries must be >= 0")
        self._max_entries = max_entries
        self._entries: OrderedDict[str, Any] = OrderedDict()
        self._hits = 0
        self._misses = 0
        self._evictions = 0

    async def get(self, key: str) -> Any | None:
        if key not in self._entries:
            self._misses += 1
            return None
        self._entries.move_to_end(key)
        self._hits += 1
        return copy.deepcopy(self._entries[key])

    async def put(self, key: str, value: Any) -> None:
        self._entries[key] = copy.deepcopy(value)
        self._entries.move_to_end(key)
        if self._max_entries and len(self._entries) > self._max_entries:
            evicted, _ = self._entries.popitem(last=False)
            self._evictions += 1
            logger.debug("Evicted cache entry %s", evicted[:12])

    async def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    async def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    @property
    def stats(self) -> CacheStats:
        return CacheStats(
            hits=self._hits,
            misses=self._misses,
            size=len(self._entries),
            max_entries=self._max_entries,
            evictions=self._evictions,
        )


class NullResponseCache(BaseResponseCache):
    """Cache that stores nothing (AI_CACHE_ENABLED=false)."""

    def __init__(self) -> None:
        self._misses = 0

    async def get(self, key: str) -> Any | None:
        self._misses += 1
        return None

    async def put(self, key: str, value: Any) -> None:
        return None

    async def delete(self, key: str) -> None:
        return None

    async def clear(self) -> None:
        return None

    @property
    def stats(self) -> CacheStats:
        return CacheStats(misses=self._misses)

# src/cache/base_cache_store.py — v2
"""Abstract response cache interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from classboard.cache.models import CacheStats


class BaseResponseCache(ABC):
    """Unified interface for AI response caches."""

    @abstractmethod
    async def get(self, key: str) -> Any | None:
        """Retrieve a cached value, or None on a miss."""

    @abstractmethod
    async def put(self, key: str, value: Any) -> None:
        """Store a value. Only successful results are ever put."""

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove a cached value."""

    @abstractmethod
    async def clear(self) -> None:
        """Drop every entry."""

    @property
    @abstractmethod
    def stats(self) -> CacheStats:
        """Hit/miss counters and current size."""

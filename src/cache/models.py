# src/cache/models.py — v2
"""Cache domain models."""

from __future__ import annotations

from pydantic import BaseModel


class CacheStats(BaseModel):
    """Counters for one response cache instance."""

    hits: int = 0
    misses: int = 0
    size: int = 0
    max_entries: int = 0
    evictions: int = 0

    @property
    def hit_rate(self) -> float:
        total = self.hits + self.misses
        return self.hits / total if total else 0.0

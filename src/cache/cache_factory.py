# src/cache/cache_factory.py — v3
"""Factory for response cache instantiation."""

from __future__ import annotations

from classboard.cache.base_cache_store import BaseResponseCache
from classboard.cache.memory_store import MemoryResponseCache, NullResponseCache
from classboard.config.settings import Settings


def create_response_cache(settings: Settings | None = None) -> BaseResponseCache:
    """Instantiate the configured response cache.

    Args:
        settings: Application settings. Defaults to a 1024-entry LRU.

    Returns:
        Configured BaseResponseCache implementation.
    """
    if settings is None:
        return MemoryResponseCache()
    if not settings.ai_cache_enabled:
        return NullResponseCache()
    return MemoryResponseCache(max_entries=settings.ai_cache_max_entries)

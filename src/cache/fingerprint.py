# src/cache/fingerprint.py — v3
"""Content-addressed cache keys for AI operations.

A key is SHA-256 over the operation discriminator ("categorize", "format",
"analyzeImage") and the canonical serialization of every input that affects
the result.
"""

from __future__ import annotations

import hashlib
import json
from typing import Any

from pydantic import BaseModel


def compute_cache_key(operation: str, *parts: Any) -> str:
    """Compute the cache key for ``operation`` applied to ``parts``.

    Args:
        operation: Operation discriminator.
        *parts: Semantically relevant inputs (str, bytes, models, dicts).

    Returns:
        Hex SHA-256 digest.
    """
    payload = "|".join([operation, *(_canonical(part) for part in parts)])
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


def _canonical(part: Any) -> str:
    """Stable text form of one key component."""
    if isinstance(part, str):
        return part
    if isinstance(part, bytes):
        # Raw images: hash first so the joined payload stays small
        return hashlib.sha256(part).hexdigest()
    if isinstance(part, BaseModel):
        return json.dumps(part.model_dump(mode="json"), sort_keys=True, ensure_ascii=False)
    if part is None:
        return ""
    return json.dumps(part, sort_keys=True, ensure_ascii=False, default=str)

# src/extraction/base_extractor.py — v2
"""Abstract extractor interface for uploaded file formats."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

from classboard.core.models import ExtractedText

UNTITLED_DOCUMENT = "Untitled Document"


class BaseExtractor(ABC):
    """Unified interface for file format extractors."""

    @property
    @abstractmethod
    def supported_extensions(self) -> list[str]:
        """File extensions this extractor handles (e.g., ['.pdf'])."""

    @abstractmethod
    async def extract(self, content: bytes | str | Path) -> ExtractedText:
        """Extract text (and whatever metadata the format carries)."""


def extract_title_from_content(content: str) -> str:
    """First non-empty line when it is a plausible title, else a placeholder."""
    for line in content.splitlines():
        candidate = line.strip()
        if candidate:
            if 3 < len(candidate) < 100:
                return candidate
            break
    return UNTITLED_DOCUMENT

# src/extraction/presentation_extractor.py — v1
"""PowerPoint placeholder extractor.

Slides are not parsed; the file name stands in for the content so the
classifier still has something to work with.
"""

from __future__ import annotations

from pathlib import Path

from classboard.core.models import ExtractedText
from classboard.extraction.base_extractor import BaseExtractor


class PresentationExtractor(BaseExtractor):
    """Extractor for presentations (.ppt, .pptx)."""

    @property
    def supported_extensions(self) -> list[str]:
        return [".ppt", ".pptx"]

    async def extract(self, content: bytes | str | Path) -> ExtractedText:
        if isinstance(content, bytes):
            raise TypeError("Presentation extraction needs a file path")
        stem = Path(content).stem
        return ExtractedText(
            content=f"PowerPoint presentation: {stem}",
            metadata={"title": stem},
        )

# src/extraction/txt_extractor.py — v3
"""Plain text extractor — passthrough with minimal processing."""

from __future__ import annotations

from pathlib import Path

from classboard.core.models import ExtractedText
from classboard.extraction.base_extractor import BaseExtractor, extract_title_from_content


class TxtExtractor(BaseExtractor):
    """Extractor for plain text files (.txt)."""

    @property
    def supported_extensions(self) -> list[str]:
        return [".txt"]

    async def extract(self, content: bytes | str | Path) -> ExtractedText:
        """Extract text from plain text file."""
        text = self._read_content(content)
        return ExtractedText(
            content=text,
            metadata={"title": extract_title_from_content(text)},
        )

    @staticmethod
    def _read_content(content: bytes | str | Path) -> str:
        if isinstance(content, bytes):
            return content.decode("utf-8", errors="replace")
        return Path(content).read_text(encoding="utf-8")

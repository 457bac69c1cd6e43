# src/extraction/image_extractor.py — v1
"""Image OCR extractor using pytesseract on Pillow images.

Tesseract is a blocking subprocess call, so recognition runs in a worker
thread. Requires the 'pytesseract' and 'Pillow' packages plus a tesseract
binary on PATH.
"""

from __future__ import annotations

import asyncio
import io
import logging
from pathlib import Path

from classboard.core.models import ExtractedText
from classboard.extraction.base_extractor import BaseExtractor, extract_title_from_content

logger = logging.getLogger(__name__)


class ImageExtractor(BaseExtractor):
    """OCR extractor for raster images."""

    def __init__(self, lang: str = "eng") -> None:
        self._lang = lang

    @property
    def supported_extensions(self) -> list[str]:
        return [".jpg", ".jpeg", ".png", ".bmp", ".tiff", ".gif"]

    async def extract(self, content: bytes | str | Path) -> ExtractedText:
        """OCR an image file (or raw image bytes)."""
        if isinstance(content, bytes):
            return await self.extract_bytes(content)
        data = await asyncio.to_thread(Path(content).read_bytes)
        return await self.extract_bytes(data)

    async def extract_bytes(self, data: bytes) -> ExtractedText:
        """OCR raw image bytes."""
        text = await asyncio.to_thread(self._recognize, data)
        logger.debug("OCR produced %d characters", len(text))
        return ExtractedText(
            content=text,
            metadata={"title": extract_title_from_content(text)},
        )

    def _recognize(self, data: bytes) -> str:
        try:
            import pytesseract
            from PIL import Image
        except ImportError as e:
            raise ImportError(
                "pytesseract and Pillow packages required for OCR: "
                "pip install pytesseract Pillow"
            ) from e

        with Image.open(io.BytesIO(data)) as image:
            # Palette/alpha modes (GIF, PNG) confuse tesseract
            if image.mode not in ("RGB", "L"):
                image = image.convert("RGB")
            return pytesseract.image_to_string(image, lang=self._lang).strip()

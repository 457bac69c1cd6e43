# src/extraction/text_extraction.py — v1
"""Text extraction service consumed by the content pipeline.

Dispatches by lowercased file extension. Multi-file extraction runs the
files concurrently and isolates failures: a file that cannot be read turns
into a placeholder entry instead of failing the whole submission.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Callable

from classboard.core.models import ExtractedText, FileExtraction
from classboard.extraction.base_extractor import BaseExtractor
from classboard.extraction.extractor_factory import (
    create_extractor,
    is_supported_file_type,
)
from classboard.extraction.image_extractor import ImageExtractor

logger = logging.getLogger(__name__)


class TextExtractionService:
    """Extract text from uploaded files."""

    def __init__(
        self,
        extractor_factory: Callable[[str], BaseExtractor] = create_extractor,
        ocr: ImageExtractor | None = None,
    ) -> None:
        self._extractor_factory = extractor_factory
        self._ocr = ocr or ImageExtractor()

    @staticmethod
    def is_supported_file_type(file_name: str) -> bool:
        return is_supported_file_type(file_name)

    async def extract_text(self, file_path: str | Path) -> ExtractedText:
        """Extract text from one file.

        Raises:
            UnsupportedFormatError: If the extension has no extractor.
        """
        path = Path(file_path)
        extractor = self._extractor_factory(path.suffix)
        return await extractor.extract(path)

    async def extract_bytes(self, data: bytes, extension: str) -> ExtractedText:
        """Extract text from an in-memory upload."""
        extractor = self._extractor_factory(extension)
        return await extractor.extract(data)

    async def ocr_image(self, data: bytes) -> ExtractedText:
        """Local OCR on raw image bytes."""
        return await self._ocr.extract_bytes(data)

    async def extract_from_multiple_files(
        self, file_paths: list[str | Path]
    ) -> list[FileExtraction]:
        """Extract every file concurrently; results keep the input order."""
        return list(await asyncio.gather(*(self._extract_one(p) for p in file_paths)))

    async def _extract_one(self, file_path: str | Path) -> FileExtraction:
        path = Path(file_path)
        try:
            extracted = await self.extract_text(path)
        except Exception as e:
            logger.warning(
                "Failed to extract text from %s: %s", path.name, e,
                extra={"data": {"file": path.name, "error_type": type(e).__name__}},
            )
            return FileExtraction(
                file_name=path.name,
                file_path=str(path),
                extracted=ExtractedText(content=f"Failed to extract text from {path.name}"),
                succeeded=False,
                error=str(e),
            )
        return FileExtraction(file_name=path.name, file_path=str(path), extracted=extracted)

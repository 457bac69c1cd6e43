# src/extraction/pdf_extractor.py — v2
"""PDF extractor using PyMuPDF (fitz).

Extracts page text, page count and the document info dictionary.
Requires the 'pymupdf' package.
"""

from __future__ import annotations

import logging
from pathlib import Path

from classboard.core.models import ExtractedText
from classboard.extraction.base_extractor import BaseExtractor

logger = logging.getLogger(__name__)

# PyMuPDF metadata key → ExtractedText.metadata key
_METADATA_KEYS = {
    "title": "title",
    "author": "author",
    "subject": "subject",
    "creator": "creator",
    "producer": "producer",
    "creationDate": "creation_date",
}


class PdfExtractor(BaseExtractor):
    """Extractor for PDF files using PyMuPDF."""

    @property
    def supported_extensions(self) -> list[str]:
        return [".pdf"]

    async def extract(self, content: bytes | str | Path) -> ExtractedText:
        """Extract text and document info from a PDF."""
        try:
            import fitz  # PyMuPDF
        except ImportError as e:
            raise ImportError(
                "pymupdf package required for PDF extraction: pip install pymupdf"
            ) from e

        doc = self._open_document(content, fitz)
        try:
            pages = [page.get_text("text") for page in doc]
            page_count = len(doc)
            raw_meta = doc.metadata or {}
        finally:
            doc.close()

        metadata = {
            ours: raw_meta[theirs]
            for theirs, ours in _METADATA_KEYS.items()
            if raw_meta.get(theirs)
        }
        logger.debug("Extracted %d PDF pages", page_count)
        return ExtractedText(content="\n".join(pages), pages=page_count, metadata=metadata)

    @staticmethod
    def _open_document(content: bytes | str | Path, fitz_module: object) -> object:
        """Open PDF from various input types."""
        fitz_mod = fitz_module  # type: ignore[assignment]
        if isinstance(content, bytes):
            return fitz_mod.open(stream=content, filetype="pdf")
        return fitz_mod.open(str(content))

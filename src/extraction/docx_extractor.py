# src/extraction/docx_extractor.py — v2
"""Word extractor using python-docx.

Extracts paragraph and table text plus core document properties. Legacy
.doc files are routed here as well; python-docx rejects most of them, and
the extraction service turns that into a per-file placeholder.
Requires the 'python-docx' package.
"""

from __future__ import annotations

import io
import logging
from pathlib import Path

from classboard.core.models import ExtractedText
from classboard.extraction.base_extractor import BaseExtractor, extract_title_from_content

logger = logging.getLogger(__name__)


class DocxExtractor(BaseExtractor):
    """Extractor for Word documents (.docx, .doc)."""

    @property
    def supported_extensions(self) -> list[str]:
        return [".docx", ".doc"]

    async def extract(self, content: bytes | str | Path) -> ExtractedText:
        """Extract text from a Word document."""
        try:
            import docx
        except ImportError as e:
            raise ImportError(
                "python-docx package required for DOCX extraction: "
                "pip install python-docx"
            ) from e

        doc = self._open_document(content, docx)

        text_parts = [para.text for para in doc.paragraphs if para.text.strip()]
        for table in doc.tables:
            for row in table.rows:
                cells = [cell.text.strip() for cell in row.cells if cell.text.strip()]
                if cells:
                    text_parts.append(" | ".join(cells))

        text = "\n".join(text_parts)
        props = doc.core_properties
        metadata: dict[str, str] = {
            "title": props.title or extract_title_from_content(text),
        }
        if props.author:
            metadata["author"] = props.author
        if props.subject:
            metadata["subject"] = props.subject
        if props.created:
            metadata["creation_date"] = props.created.isoformat()

        return ExtractedText(content=text, metadata=metadata)

    @staticmethod
    def _open_document(content: bytes | str | Path, docx_module: object) -> object:
        """Open DOCX from various input types."""
        docx_mod = docx_module  # type: ignore[assignment]
        if isinstance(content, bytes):
            return docx_mod.Document(io.BytesIO(content))
        p = Path(content)
        if not p.is_file():
            raise FileNotFoundError(f"DOCX file not found: {content}")
        return docx_mod.Document(str(p))

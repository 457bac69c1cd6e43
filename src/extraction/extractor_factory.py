# src/extraction/extractor_factory.py — v3
"""Factory: instantiate extractor from file extension."""

from __future__ import annotations

from pathlib import Path

from classboard.extraction.base_extractor import BaseExtractor
from classboard.extraction.docx_extractor import DocxExtractor
from classboard.extraction.image_extractor import ImageExtractor
from classboard.extraction.pdf_extractor import PdfExtractor
from classboard.extraction.presentation_extractor import PresentationExtractor
from classboard.extraction.txt_extractor import TxtExtractor

# Registry maps extension → extractor class.
_EXTRACTOR_REGISTRY: dict[str, type[BaseExtractor]] = {}


def _register_defaults() -> None:
    """Register built-in extractors."""
    for cls in [PdfExtractor, DocxExtractor, PresentationExtractor,
                ImageExtractor, TxtExtractor]:
        instance = cls()
        for ext in instance.supported_extensions:
            _EXTRACTOR_REGISTRY[ext.lower()] = cls


_register_defaults()


class UnsupportedFormatError(ValueError):
    """Raised when no extractor is available for a format."""


def create_extractor(extension: str) -> BaseExtractor:
    """Create an extractor for the given file extension.

    Args:
        extension: File extension, with or without the dot (".pdf", "PDF").

    Returns:
        BaseExtractor instance.

    Raises:
        UnsupportedFormatError: If no extractor is registered.
    """
    ext = extension.lower()
    if not ext.startswith("."):
        ext = f".{ext}"

    cls = _EXTRACTOR_REGISTRY.get(ext)
    if cls is None:
        raise UnsupportedFormatError(
            f"Unsupported file type: {ext!r}. "
            f"Supported: {', '.join(sorted(_EXTRACTOR_REGISTRY))}"
        )
    return cls()


def register_extractor(extension: str, cls: type[BaseExtractor]) -> None:
    """Register a custom extractor for an extension."""
    _EXTRACTOR_REGISTRY[extension.lower()] = cls


def is_supported_file_type(file_name: str) -> bool:
    """Whether ``file_name``'s extension has a registered extractor."""
    return Path(file_name).suffix.lower() in _EXTRACTOR_REGISTRY


def supported_extensions() -> list[str]:
    """Return list of supported file extensions."""
    return sorted(_EXTRACTOR_REGISTRY.keys())

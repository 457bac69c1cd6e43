# src/core/models.py — v2
"""Shared Pydantic domain models used across modules.

No module redefines these types; the pipeline, the extraction service and
the facade all import them from core.models.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field

Category = Literal["assignments", "notes", "presentations", "general"]

CATEGORIES: tuple[str, ...] = ("assignments", "notes", "presentations", "general")

InputType = Literal["text", "image", "pdf", "docx"]


# === CLASSIFICATION / FORMATTING ===


class CategoryResult(BaseModel):
    """Output of the classification step."""

    category: Category = "general"
    confidence: float = Field(default=0.5, ge=0.0, le=1.0)
    is_urgent: bool = False
    due_date: str | None = None
    tags: list[str] = Field(default_factory=list)


class FormattedContent(BaseModel):
    """Terminal output of the pipeline: title, description, category."""

    title: str = Field(max_length=80)
    content: str = ""
    category: CategoryResult
    generated_by: Literal["ai", "heuristic"] = "ai"


# === EXTRACTION ===


class ExtractedText(BaseModel):
    """Text pulled out of one uploaded file."""

    content: str
    pages: int | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)


class FileExtraction(BaseModel):
    """Per-file provenance of a multi-file submission."""

    file_name: str
    file_path: str | None = None
    extracted: ExtractedText
    succeeded: bool = True
    error: str | None = None


# === PIPELINE RESULTS ===


class ProcessedContent(BaseModel):
    """Result of a context-text-plus-files submission."""

    raw_text: str
    title: str
    description: str
    category: CategoryResult
    files: list[FileExtraction] = Field(default_factory=list)
    generated_by: Literal["ai", "heuristic"] = "ai"


class ProcessedInput(BaseModel):
    """Result of a single-input submission (text, image, pdf, docx)."""

    input_type: InputType
    extracted_text: str
    title: str
    content: str
    category: CategoryResult
    generated_by: Literal["ai", "heuristic"] = "ai"

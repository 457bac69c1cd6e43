# src/pipeline/prompts.py — v1
"""Prompt builders for the content pipeline.

Templates live in ``templates/*.txt`` and are filled with str.format, so
literal braces in them are doubled.
"""

from __future__ import annotations

from datetime import date
from functools import lru_cache
from pathlib import Path
from typing import Literal

from classboard.core.models import CategoryResult

_TEMPLATE_DIR = Path(__file__).parent / "templates"

FormatStyle = Literal["title", "general", "structured"]


@lru_cache(maxsize=None)
def load_template(name: str) -> str:
    return (_TEMPLATE_DIR / f"{name}.txt").read_text(encoding="utf-8")


def categorize_prompt(content: str, today: date | None = None) -> str:
    """Classification prompt: category, urgency, due date, tags."""
    return load_template("categorize").format(
        content=content,
        today=(today or date.today()).isoformat(),
    )


def format_prompt(content: str, category: CategoryResult, style: FormatStyle) -> str:
    """Formatting prompt for one of the three reply shapes.

    ``title`` asks for a title only, ``general`` for a title plus the
    rewritten body, ``structured`` for a title plus a deadline/venue/
    requirements description.
    """
    return load_template(f"format_{style}").format(
        content=content,
        category=category.category,
    )


def analyze_image_prompt() -> str:
    return load_template("analyze_image").strip()

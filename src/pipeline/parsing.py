# src/pipeline/parsing.py — v2
"""Parse model replies into strictly validated objects.

Model output is untrusted: it may be wrapped in code fences or prose, have
missing keys or carry wrong types. Every such mismatch becomes a
ReplyParseError, which the pipeline turns into a retry or a fallback.
"""

from __future__ import annotations

import json
import re
from datetime import date
from typing import Any, Literal, TypeVar

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictStr,
    ValidationError,
    field_validator,
)

T = TypeVar("T", bound=BaseModel)

_FENCE_PATTERN = re.compile(r"^\s*```[a-zA-Z]*\s*$", re.MULTILINE)
_DECODER = json.JSONDecoder()


class ReplyParseError(ValueError):
    """A model reply that is not the JSON object the prompt asked for."""


class CategoryReply(BaseModel):
    """Reply to the classification prompt."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    category: Literal["assignments", "notes", "presentations", "general"]
    confidence: float = Field(ge=0.0, le=1.0, strict=True)
    is_urgent: StrictBool = Field(alias="isUrgent")
    due_date: StrictStr | None = Field(default=None, alias="dueDate")
    tags: list[StrictStr] = Field(default_factory=list)

    @field_validator("due_date", mode="before")
    @classmethod
    def null_like_to_none(cls, v: Any) -> Any:
        if isinstance(v, str) and v.strip().lower() in ("", "null", "none"):
            return None
        return v

    @field_validator("due_date")
    @classmethod
    def validate_iso_date(cls, v: str | None) -> str | None:
        if v is None:
            return None
        return date.fromisoformat(v.strip()).isoformat()

    @field_validator("tags")
    @classmethod
    def dedupe_tags(cls, v: list[str]) -> list[str]:
        seen: dict[str, None] = {}
        for tag in v:
            tag = tag.strip()
            if tag:
                seen.setdefault(tag, None)
        return list(seen)


class TitleReply(BaseModel):
    """Reply to the title-only prompt."""

    model_config = ConfigDict(extra="ignore")

    title: StrictStr

    @field_validator("title")
    @classmethod
    def non_empty_title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("title is empty")
        return v


class TitleContentReply(TitleReply):
    """Reply to the title-plus-description prompts."""

    content: StrictStr

    @field_validator("content")
    @classmethod
    def non_empty_content(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("content is empty")
        return v


def extract_json_object(text: str) -> dict[str, Any]:
    """Pull the first JSON object out of a model reply.

    Raises:
        ReplyParseError: If no JSON object can be decoded.
    """
    cleaned = _FENCE_PATTERN.sub("", text).strip()
    try:
        value = json.loads(cleaned)
    except json.JSONDecodeError:
        value = _embedded_json(cleaned)
    if not isinstance(value, dict):
        raise ReplyParseError("Reply JSON is not an object")
    return value


def _embedded_json(text: str) -> Any:
    """Decode the JSON value wrapped in surrounding prose."""
    starts = [i for i in (text.find("{"), text.find("[")) if i != -1]
    if not starts:
        raise ReplyParseError("Reply contains no JSON object")

    first = min(starts)
    if text[first] == "[":
        try:
            value, _ = _DECODER.raw_decode(text, first)
        except json.JSONDecodeError:
            pass  # a bracket in the prose; look for an object instead
        else:
            return value

    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end < start:
        raise ReplyParseError("Reply contains no JSON object")
    try:
        return json.loads(text[start : end + 1])
    except json.JSONDecodeError as e:
        raise ReplyParseError(f"Reply is not valid JSON: {e.msg}") from e


def parse_reply(text: str, schema: type[T]) -> T:
    """Decode and validate a reply against ``schema``.

    Raises:
        ReplyParseError: On any decoding or validation failure.
    """
    data = extract_json_object(text)
    try:
        return schema.model_validate(data)
    except ValidationError as e:
        raise ReplyParseError(
            f"Reply does not match {schema.__name__}: {e.error_count()} error(s)"
        ) from e

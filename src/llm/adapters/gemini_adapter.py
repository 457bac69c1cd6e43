# src/llm/adapters/gemini_adapter.py — v2
"""Google Gemini adapter (vendor family B).

Uses the google-genai SDK. Each instance owns its own client bound to its own
key, so several Gemini instances can run concurrently. Supports vision via
inline image parts.
"""

from __future__ import annotations

import asyncio
import re
from typing import Any

import httpx

from classboard.llm.base_client import BaseProviderAdapter
from classboard.llm.models import ImageInput
from classboard.llm.retry import ClassifiedError, parse_retry_delay

DEFAULT_MODEL = "gemini-1.5-flash"

_RETRY_IN_PATTERN = re.compile(
    r"(?:retry in|retryDelay['\"]?\s*[:=]\s*['\"]?)\s*(\d+(?:\.\d+)?)\s*s", re.IGNORECASE
)
_PER_DAY_PATTERN = re.compile(r"per\s*day|PerDay", re.IGNORECASE)


class GeminiAdapter(BaseProviderAdapter):
    """Google Gemini adapter."""

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._sdk_client: Any = None

    @property
    def family(self) -> str:
        return "gemini"

    @property
    def default_model(self) -> str:
        return DEFAULT_MODEL

    @property
    def supports_vision(self) -> bool:
        return True

    def _client(self) -> Any:
        if self._sdk_client is None:
            from google import genai

            self._sdk_client = genai.Client(api_key=self._config.api_key)
        return self._sdk_client

    async def _call(self, prompt: str, model: str, **extra: Any) -> str:
        resp = await self._client().aio.models.generate_content(
            model=model, contents=prompt
        )
        return resp.text or ""

    async def _call_with_image(self, prompt: str, image: ImageInput, model: str) -> str:
        contents = [
            prompt,
            {"inline_data": {"data": image.data, "mime_type": image.media_type}},
        ]
        resp = await self._client().aio.models.generate_content(
            model=model, contents=contents
        )
        return resp.text or ""

    def classify_error(self, error: Exception) -> ClassifiedError:
        message = getattr(error, "message", None) or str(error) or type(error).__name__

        if isinstance(error, (httpx.TransportError, asyncio.TimeoutError, ConnectionError)):
            return ClassifiedError("transient", message)

        code = getattr(error, "code", None)
        if not isinstance(code, int):
            code = getattr(error, "status_code", None)
        if not isinstance(code, int):
            return ClassifiedError("permanent", message)

        details = getattr(error, "details", None)
        if code == 429:
            if _is_daily_quota(details, message):
                return ClassifiedError("quota_exhausted", message)
            return ClassifiedError(
                "rate_limited", message, _retry_delay(details, str(error))
            )
        if code >= 500:
            return ClassifiedError("transient", message)
        return ClassifiedError("permanent", message)


def _error_details(details: Any) -> list[dict[str, Any]]:
    """The google.rpc detail objects from an APIError response body."""
    if not isinstance(details, dict):
        return []
    body = details.get("error", details)
    items = body.get("details", []) if isinstance(body, dict) else []
    return [item for item in items if isinstance(item, dict)]


def _is_daily_quota(details: Any, message: str) -> bool:
    for item in _error_details(details):
        if not str(item.get("@type", "")).endswith("QuotaFailure"):
            continue
        for violation in item.get("violations", []) or []:
            quota_id = str(violation.get("quotaId", "")) if isinstance(violation, dict) else ""
            if _PER_DAY_PATTERN.search(quota_id):
                return True
    return bool(_PER_DAY_PATTERN.search(message))


def _retry_delay(details: Any, text: str) -> float | None:
    for item in _error_details(details):
        if str(item.get("@type", "")).endswith("RetryInfo"):
            delay = parse_retry_delay(item.get("retryDelay"))
            if delay is not None:
                return delay
    match = _RETRY_IN_PATTERN.search(text)
    return float(match.group(1)) if match else None

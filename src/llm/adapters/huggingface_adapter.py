# src/llm/adapters/huggingface_adapter.py — v1
"""Hugging Face Inference adapter (vendor family A).

Plain HTTP against the hosted inference endpoint through httpx; there is no
SDK. Text only.
"""

from __future__ import annotations

import json
from typing import Any

import httpx

from classboard.llm.base_client import BaseProviderAdapter
from classboard.llm.retry import ClassifiedError, parse_retry_delay

DEFAULT_MODEL = "microsoft/DialoGPT-medium"
DEFAULT_BASE_URL = "https://router.huggingface.co/hf-inference/models"

DEFAULT_PARAMETERS: dict[str, Any] = {
    "max_length": 512,
    "temperature": 0.7,
    "do_sample": True,
}


class HuggingFaceResponseError(ValueError):
    """The endpoint answered 2xx but reported an error in the body."""


class HuggingFaceAdapter(BaseProviderAdapter):
    """Hugging Face hosted inference adapter."""

    def __init__(
        self,
        *args: Any,
        base_url: str = DEFAULT_BASE_URL,
        timeout_s: float = 30.0,
        **kwargs: Any,
    ) -> None:
        super().__init__(*args, **kwargs)
        self._base_url = base_url.rstrip("/")
        self._timeout_s = timeout_s
        self._sdk_client: httpx.AsyncClient | None = None

    @property
    def family(self) -> str:
        return "huggingface"

    @property
    def default_model(self) -> str:
        return DEFAULT_MODEL

    def _client(self) -> httpx.AsyncClient:
        if self._sdk_client is None:
            self._sdk_client = httpx.AsyncClient(timeout=self._timeout_s)
        return self._sdk_client

    async def aclose(self) -> None:
        if self._sdk_client is not None:
            await self._sdk_client.aclose()
            self._sdk_client = None

    async def _call(self, prompt: str, model: str, **extra: Any) -> str:
        parameters = {**DEFAULT_PARAMETERS, **extra.get("parameters", {})}
        resp = await self._client().post(
            f"{self._base_url}/{model}",
            headers={"Authorization": f"Bearer {self._config.api_key}"},
            json={"inputs": prompt, "parameters": parameters},
        )
        resp.raise_for_status()
        return _extract_text(resp.json())

    def classify_error(self, error: Exception) -> ClassifiedError:
        if isinstance(error, httpx.HTTPStatusError):
            status = error.response.status_code
            message = f"HTTP {status}: {_error_body(error.response)}"
            if status == 429:
                retry_after = parse_retry_delay(error.response.headers.get("retry-after"))
                return ClassifiedError("rate_limited", message, retry_after)
            if status == 402:
                return ClassifiedError("quota_exhausted", message)
            if status >= 500:
                return ClassifiedError("transient", message)
            return ClassifiedError("permanent", message)

        if isinstance(error, (httpx.TransportError, httpx.TimeoutException)):
            return ClassifiedError("transient", f"{type(error).__name__}: {error}")

        return ClassifiedError("permanent", str(error) or type(error).__name__)


def _extract_text(payload: Any) -> str:
    """Pull generated text out of the shapes the inference API returns."""
    if isinstance(payload, dict) and "error" in payload:
        raise HuggingFaceResponseError(str(payload["error"]))

    item = payload[0] if isinstance(payload, list) and payload else payload
    if isinstance(item, dict):
        for key in ("generated_text", "summary_text"):
            if isinstance(item.get(key), str):
                return item[key]
    return json.dumps(payload)


def _error_body(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text[:200]
    if isinstance(body, dict) and "error" in body:
        return str(body["error"])[:200]
    return json.dumps(body)[:200]

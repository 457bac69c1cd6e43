# src/llm/base_client.py — v3
"""Abstract provider adapter.

One subclass per vendor family. Subclasses implement the raw call and the
error classification; this base class runs the shared retry loop, routes
every vendor call through the process-wide concurrency limiter, and turns
the outcome into a GenerationResult. ``generate`` never raises for vendor
errors.
"""

from __future__ import annotations

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable

from classboard.llm.models import GenerationResult, ImageInput, ProviderConfig
from classboard.llm.rate_limiter import ConcurrencyLimiter
from classboard.llm.retry import (
    ClassifiedError,
    ProviderCallError,
    RetryPolicy,
    Sleep,
    call_with_retry,
)

logger = logging.getLogger(__name__)


class BaseProviderAdapter(ABC):
    """Unified interface for all vendor families."""

    def __init__(
        self,
        config: ProviderConfig,
        limiter: ConcurrencyLimiter | None = None,
        policy: RetryPolicy | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._config = config
        self._limiter = limiter or ConcurrencyLimiter()
        self._policy = policy or RetryPolicy()
        self._sleep = sleep

    @property
    def config(self) -> ProviderConfig:
        return self._config

    @property
    def provider_name(self) -> str:
        return self._config.name

    @property
    @abstractmethod
    def family(self) -> str:
        """Vendor family identifier (huggingface, gemini)."""

    @property
    @abstractmethod
    def default_model(self) -> str:
        """Model used when neither the config nor the caller names one."""

    @property
    def supports_vision(self) -> bool:
        """Whether this adapter accepts image input."""
        return False

    @abstractmethod
    async def _call(self, prompt: str, model: str, **extra: Any) -> str:
        """Issue one vendor request and return its text."""

    async def _call_with_image(self, prompt: str, image: ImageInput, model: str) -> str:
        raise NotImplementedError(f"{self.family} adapter has no vision support")

    @abstractmethod
    def classify_error(self, error: Exception) -> ClassifiedError:
        """Map a vendor exception onto the shared taxonomy."""

    # --- Public entry points ---

    async def generate(self, prompt: str, model: str | None = None, **extra: Any) -> GenerationResult:
        """Text generation with the adapter's retry budget applied."""
        resolved = self._resolve_model(model)
        return await self._run(
            lambda: self._limiter.schedule(self._call, prompt, resolved, **extra),
            resolved,
        )

    async def generate_with_image(
        self, prompt: str, image: ImageInput, model: str | None = None
    ) -> GenerationResult:
        """Vision generation; a permanent failure when unsupported."""
        resolved = self._resolve_model(model)
        if not self.supports_vision:
            return GenerationResult(
                success=False,
                provider=self.provider_name,
                model=resolved,
                error_kind="permanent",
                error=f"{self.family} adapter has no vision support",
                attempts=0,
            )
        return await self._run(
            lambda: self._limiter.schedule(self._call_with_image, prompt, image, resolved),
            resolved,
        )

    async def aclose(self) -> None:
        """Release connections held by the adapter. No-op unless overridden."""

    # --- Internal helpers ---

    def _resolve_model(self, model: str | None) -> str:
        return model or self._config.model or self.default_model

    async def _run(self, fn: Callable[[], Awaitable[str]], model: str) -> GenerationResult:
        start = time.monotonic()
        try:
            text, attempts = await call_with_retry(
                fn,
                self.classify_error,
                provider=self.provider_name,
                policy=self._policy,
                sleep=self._sleep,
            )
        except ProviderCallError as e:
            logger.warning(
                "Provider %s failed: %s",
                self.provider_name, e.error.message,
                extra={"data": {"provider": self.provider_name, "kind": e.error.kind}},
            )
            return GenerationResult(
                success=False,
                provider=self.provider_name,
                model=model,
                error_kind=e.error.kind,
                error=e.error.message,
                attempts=e.attempts,
                latency_ms=int((time.monotonic() - start) * 1000),
            )

        return GenerationResult(
            success=True,
            text=text,
            provider=self.provider_name,
            model=model,
            attempts=attempts,
            latency_ms=int((time.monotonic() - start) * 1000),
        )

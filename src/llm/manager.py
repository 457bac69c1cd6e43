# src/llm/manager.py — v2
"""Fallback orchestrator across every configured provider.

An explicit, constructed object: the composition root builds one and hands it
to the content pipeline. It owns the provider health state (circuit breaker)
and the per-provider adapters; the registry and the concurrency limiter are
shared with whoever else holds them.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable

from classboard.config.settings import Settings
from classboard.llm.base_client import BaseProviderAdapter
from classboard.llm.client_factory import create_adapter
from classboard.llm.health import ProviderHealth
from classboard.llm.models import (
    EXHAUSTION_KINDS,
    AIResult,
    GenerationResult,
    ImageInput,
    ManagerStatus,
    ProviderAttempt,
    ProviderConfig,
    ProviderFamily,
    ProviderStatus,
)
from classboard.llm.rate_limiter import ConcurrencyLimiter
from classboard.llm.registry import ProviderRegistry
from classboard.llm.retry import Sleep
from classboard.logging.logger import preview

logger = logging.getLogger(__name__)

TEST_PROMPT = "Hello, this is a test prompt. Please respond with a simple greeting."

AdapterFactory = Callable[
    [ProviderConfig, ConcurrencyLimiter, Settings, Sleep], BaseProviderAdapter
]


class AIProviderManager:
    """Tries providers in priority order until one succeeds."""

    def __init__(
        self,
        registry: ProviderRegistry,
        limiter: ConcurrencyLimiter,
        health: ProviderHealth,
        settings: Settings,
        adapter_factory: AdapterFactory = create_adapter,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._registry = registry
        self._limiter = limiter
        self._health = health
        self._settings = settings
        self._adapter_factory = adapter_factory
        self._sleep = sleep
        self._adapters: dict[str, BaseProviderAdapter] = {}

    @property
    def registry(self) -> ProviderRegistry:
        return self._registry

    @property
    def health(self) -> ProviderHealth:
        return self._health

    # --- Fallback entry points ---

    async def generate_with_fallback(
        self,
        prompt: str,
        preferred_family: ProviderFamily | None = None,
        **extra: Any,
    ) -> AIResult:
        """Text generation over the fallback chain.

        Args:
            prompt: Prompt text.
            preferred_family: Family whose providers are tried first.
            **extra: Passed through to the adapter call.

        Returns:
            The first successful result, or a failure of kind
            ``no_providers`` / ``all_failed``. Never raises for vendor errors.
        """
        candidates = self._candidates(preferred_family)

        async def call(adapter: BaseProviderAdapter) -> GenerationResult:
            return await adapter.generate(prompt, **extra)

        return await self._run_chain(candidates, call, prompt)

    async def generate_vision_with_fallback(
        self, prompt: str, image: ImageInput
    ) -> AIResult:
        """Vision generation over the vision-capable providers only."""
        candidates = [
            p for p in self._candidates("gemini")
            if (adapter := self._adapter(p)) is not None and adapter.supports_vision
        ]
        vision_model = self._settings.gemini_vision_model

        async def call(adapter: BaseProviderAdapter) -> GenerationResult:
            return await adapter.generate_with_image(prompt, image, model=vision_model)

        return await self._run_chain(candidates, call, prompt)

    # --- Direct entry points (no fallback) ---

    async def use_huggingface(self, prompt: str, model: str | None = None) -> AIResult:
        """Call the first available Hugging Face provider directly."""
        providers = self._available_by_family("huggingface")
        if not providers:
            return _not_found("No HuggingFace providers available")
        return await self._call_direct(providers[0], prompt, model)

    async def use_gemini(
        self,
        model: str | None,
        prompt: str,
        provider_name: str | None = None,
    ) -> AIResult:
        """Call a named Gemini instance, or the first available one.

        A named instance is called even while it cools down; only the
        unnamed lookup skips providers the circuit breaker has excluded.
        """
        if provider_name is None:
            providers = self._available_by_family("gemini")
            if not providers:
                return _not_found("No Gemini providers available")
            provider = providers[0]
        else:
            provider = self._registry.get(provider_name)
            if provider is None or provider.family != "gemini" or not provider.active:
                return _not_found(f"Gemini provider {provider_name} not available")
        return await self._call_direct(provider, prompt, model)

    async def test_provider(self, name: str) -> AIResult:
        """Send a fixed greeting prompt to one provider, bypassing fallback."""
        provider = self._registry.get(name)
        if provider is None:
            return _not_found(f"Provider {name} not found")
        return await self._call_direct(provider, TEST_PROMPT, None)

    async def aclose(self) -> None:
        """Close every adapter built so far; later calls rebuild them."""
        adapters = list(self._adapters.values())
        self._adapters.clear()
        for adapter in adapters:
            await adapter.aclose()

    # --- Status ---

    def get_status(self) -> ManagerStatus:
        """Snapshot of the pool: totals, cooling-down providers, per-provider state."""
        unavailable = set(self._health.unavailable())
        statuses: list[ProviderStatus] = []
        for p in self._registry.all():
            if not p.active:
                status = "disabled"
            elif p.name in unavailable:
                status = "failed"
            else:
                status = "active"
            statuses.append(
                ProviderStatus(
                    name=p.name,
                    family=p.family,
                    model=p.model,
                    priority=p.priority,
                    status=status,
                )
            )
        return ManagerStatus(
            total_providers=len(self._registry),
            active_providers=sum(1 for s in statuses if s.status == "active"),
            failed_providers=sorted(unavailable),
            providers=statuses,
            in_flight=self._limiter.in_flight,
            waiting=self._limiter.waiting,
        )

    # --- Internal helpers ---

    def _candidates(self, preferred_family: ProviderFamily | None) -> list[ProviderConfig]:
        candidates = [
            p for p in self._registry.list_active() if self._health.is_available(p.name)
        ]
        if preferred_family is not None:
            # sorted() is stable; priority order holds within each group
            candidates = sorted(
                candidates, key=lambda p: (p.family != preferred_family, p.priority)
            )
        return candidates

    def _available_by_family(self, family: ProviderFamily) -> list[ProviderConfig]:
        return [
            p for p in self._registry.list_by_family(family)
            if self._health.is_available(p.name)
        ]

    def _adapter(self, provider: ProviderConfig) -> BaseProviderAdapter | None:
        adapter = self._adapters.get(provider.name)
        if adapter is not None:
            return adapter
        try:
            adapter = self._adapter_factory(
                provider, self._limiter, self._settings, self._sleep
            )
        except Exception:
            logger.exception("Failed to initialize provider %s, disabling it", provider.name)
            self._registry.disable(provider.name)
            return None
        self._adapters[provider.name] = adapter
        return adapter

    async def _run_chain(
        self,
        candidates: list[ProviderConfig],
        call: Callable[[BaseProviderAdapter], Any],
        prompt: str,
    ) -> AIResult:
        if not candidates:
            logger.error(
                "No AI providers available",
                extra={"data": {"input": preview(prompt)}},
            )
            return AIResult(
                success=False,
                error_kind="no_providers",
                error="No AI providers available",
            )

        attempts: list[ProviderAttempt] = []
        for provider in candidates:
            adapter = self._adapter(provider)
            if adapter is None:
                attempts.append(
                    ProviderAttempt(
                        provider=provider.name,
                        family=provider.family,
                        success=False,
                        error_kind="permanent",
                        error="Adapter could not be initialized",
                    )
                )
                continue

            logger.info("Trying provider: %s", provider.name)
            result: GenerationResult = await call(adapter)
            attempts.append(
                ProviderAttempt(
                    provider=provider.name,
                    family=provider.family,
                    success=result.success,
                    error_kind=result.error_kind,
                    error=result.error,
                )
            )

            if result.success:
                logger.info("Success with provider: %s", provider.name)
                return AIResult(
                    success=True,
                    text=result.text,
                    provider=provider.name,
                    model=result.model,
                    attempts=attempts,
                )

            logger.warning(
                "Provider %s failed (%s), trying next",
                provider.name, result.error_kind,
                extra={"data": {
                    "provider": provider.name,
                    "error": result.error[:200],
                    "input": preview(prompt),
                }},
            )
            if result.error_kind in EXHAUSTION_KINDS:
                self._health.mark_unavailable(provider.name)

        logger.error(
            "All AI providers failed",
            extra={"data": {"tried": [a.provider for a in attempts], "input": preview(prompt)}},
        )
        return AIResult(
            success=False,
            error_kind="all_failed",
            error="All AI providers failed",
            attempts=attempts,
        )

    async def _call_direct(
        self, provider: ProviderConfig, prompt: str, model: str | None
    ) -> AIResult:
        adapter = self._adapter(provider)
        if adapter is None:
            return _not_found(f"Provider {provider.name} could not be initialized")

        result = await adapter.generate(prompt, model=model)
        attempt = ProviderAttempt(
            provider=provider.name,
            family=provider.family,
            success=result.success,
            error_kind=result.error_kind,
            error=result.error,
        )
        if not result.success and result.error_kind in EXHAUSTION_KINDS:
            self._health.mark_unavailable(provider.name)
        return AIResult(
            success=result.success,
            text=result.text,
            provider=provider.name,
            model=result.model,
            error_kind=result.error_kind,
            error=result.error,
            attempts=[attempt],
        )


def _not_found(message: str) -> AIResult:
    logger.warning(message)
    return AIResult(success=False, error_kind="not_found", error=message)

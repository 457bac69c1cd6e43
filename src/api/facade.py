# src/api/facade.py — v3
"""Public API facade: composition root and deadline-bounded entry points.

Usage:
    from classboard.api.facade import build_services
    services = build_services()
    formatted = await services.content.format(text, category)

``build_services`` wires registry → limiter → health → manager → cache →
extraction → pipeline explicitly; nothing here is a module-level singleton,
so several independent service graphs can coexist (tests rely on this).
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Awaitable, Coroutine, TypeVar

from classboard.cache.base_cache_store import BaseResponseCache
from classboard.cache.cache_factory import create_response_cache
from classboard.config.settings import Settings
from classboard.core.models import (
    CategoryResult,
    FileExtraction,
    FormattedContent,
    InputType,
    ProcessedContent,
    ProcessedInput,
)
from classboard.extraction.text_extraction import TextExtractionService
from classboard.llm.client_factory import create_adapter
from classboard.llm.health import ProviderHealth
from classboard.llm.manager import AdapterFactory, AIProviderManager
from classboard.llm.rate_limiter import ConcurrencyLimiter
from classboard.llm.registry import ProviderRegistry
from classboard.llm.retry import Sleep
from classboard.logging.context import set_request_context
from classboard.pipeline.content_pipeline import ContentPipeline

logger = logging.getLogger(__name__)

T = TypeVar("T")


class PipelineTimeoutError(TimeoutError):
    """The outer deadline expired before the pipeline produced a result."""


class ContentService:
    """Pipeline operations raced against one outer deadline.

    On expiry the caller gets PipelineTimeoutError while the pipeline task
    keeps running in the background; vendor calls already in flight are not
    aborted, and a late success still lands in the response cache.
    """

    def __init__(self, pipeline: ContentPipeline, timeout_s: float = 30.0) -> None:
        self._pipeline = pipeline
        self._timeout_s = timeout_s
        self._background: set[asyncio.Task[Any]] = set()

    @property
    def pipeline(self) -> ContentPipeline:
        return self._pipeline

    @property
    def pending(self) -> int:
        """Pipeline tasks still running, including ones whose caller timed out."""
        return len(self._background)

    async def categorize(self, text: str) -> CategoryResult:
        return await self._run("categorize", self._pipeline.categorize(text))

    async def format(self, text: str, category: CategoryResult) -> FormattedContent:
        return await self._run("format", self._pipeline.format(text, category))

    async def process_with_files(
        self, context_text: str, files: list[FileExtraction]
    ) -> ProcessedContent:
        return await self._run(
            "processWithFiles", self._pipeline.process_with_files(context_text, files)
        )

    async def process_files(
        self, context_text: str, paths: list[str | Path]
    ) -> ProcessedContent:
        return await self._run(
            "processFiles", self._pipeline.process_files(context_text, paths)
        )

    async def process_input(
        self, value: str | bytes, input_type: InputType = "text"
    ) -> ProcessedInput:
        return await self._run(
            "processInput", self._pipeline.process_input(value, input_type)
        )

    async def analyze_image(
        self, image: bytes | str, media_type: str = "image/jpeg"
    ) -> str:
        return await self._run(
            "analyzeImage", self._pipeline.analyze_image(image, media_type)
        )

    async def drain(self) -> None:
        """Wait for background pipeline tasks left behind by timeouts."""
        if self._background:
            await asyncio.gather(*self._background, return_exceptions=True)

    async def _run(self, operation: str, coro: Coroutine[Any, Any, T]) -> T:
        request_id = uuid.uuid4().hex[:12]
        task = asyncio.create_task(_with_context(request_id, operation, coro))
        self._background.add(task)
        task.add_done_callback(self._task_done)

        try:
            return await asyncio.wait_for(asyncio.shield(task), timeout=self._timeout_s)
        except asyncio.TimeoutError:
            logger.error(
                "%s exceeded %.1fs deadline",
                operation, self._timeout_s,
                extra={"data": {"request_id": request_id, "operation": operation}},
            )
            raise PipelineTimeoutError(
                f"{operation} did not complete within {self._timeout_s}s"
            ) from None

    def _task_done(self, task: asyncio.Task[Any]) -> None:
        self._background.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.debug("Pipeline task ended with %s", type(task.exception()).__name__)


async def _with_context(request_id: str, operation: str, coro: Awaitable[T]) -> T:
    # Runs in its own task, so the context vars set here stay local to it
    set_request_context(request_id, operation)
    return await coro


@dataclass
class AIServices:
    """Everything one service graph owns."""

    settings: Settings
    registry: ProviderRegistry
    limiter: ConcurrencyLimiter
    health: ProviderHealth
    manager: AIProviderManager
    cache: BaseResponseCache
    extraction: TextExtractionService
    pipeline: ContentPipeline
    content: ContentService

    async def aclose(self) -> None:
        """Release vendor connections held by the provider adapters."""
        await self.manager.aclose()


def build_services(
    settings: Settings | None = None,
    adapter_factory: AdapterFactory | None = None,
    sleep: Sleep | None = None,
    registry: ProviderRegistry | None = None,
) -> AIServices:
    """Compose a complete service graph.

    Args:
        settings: Global settings. Loaded from .env if None.
        adapter_factory: Adapter constructor (tests pass fakes).
        sleep: Awaitable used for every backoff wait.
        registry: Pre-built registry; built from settings if None.

    Returns:
        AIServices with the content service ready to use.
    """
    settings = settings or Settings()
    sleep = sleep or asyncio.sleep
    registry = registry or ProviderRegistry.from_settings(settings)

    valid, invalid = registry.validate_credentials(settings.min_credential_length)
    if invalid:
        logger.warning("Providers with implausible credentials: %s", ", ".join(invalid))
    if not valid:
        logger.warning("No AI providers have usable credentials")

    limiter = ConcurrencyLimiter(settings.ai_max_concurrency)
    health = ProviderHealth(cooldown_s=settings.ai_provider_cooldown_s)
    manager = AIProviderManager(
        registry,
        limiter,
        health,
        settings,
        adapter_factory=adapter_factory or create_adapter,
        sleep=sleep,
    )
    cache = create_response_cache(settings)
    extraction = TextExtractionService()
    pipeline = ContentPipeline(manager, cache, settings, extraction, sleep=sleep)
    content = ContentService(pipeline, timeout_s=settings.pipeline_timeout_s)

    return AIServices(
        settings=settings,
        registry=registry,
        limiter=limiter,
        health=health,
        manager=manager,
        cache=cache,
        extraction=extraction,
        pipeline=pipeline,
        content=content,
    )

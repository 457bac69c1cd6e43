# tests/conftest.py — v3
"""Shared test fixtures for all unit tests.

Provides scripted provider adapters, a fake clock, a recording sleep and
settings isolated from the host environment. No network access: vendor
calls are scripted or served by httpx.MockTransport.
"""

from __future__ import annotations

from typing import Any, Callable

import pytest

from classboard.config.settings import Settings
from classboard.llm.base_client import BaseProviderAdapter
from classboard.llm.client_factory import retry_policy_from_settings
from classboard.llm.health import ProviderHealth
from classboard.llm.manager import AIProviderManager
from classboard.llm.models import ImageInput, ProviderConfig
from classboard.llm.rate_limiter import ConcurrencyLimiter
from classboard.llm.registry import ProviderRegistry
from classboard.llm.retry import ClassifiedError

VALID_KEY = "test-key-0123456789"


# === ENVIRONMENT ISOLATION ===


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep real credentials and overrides in the host env out of Settings."""
    for field in Settings.model_fields:
        monkeypatch.delenv(field.upper(), raising=False)


def make_settings(**overrides: Any) -> Settings:
    return Settings(_env_file=None, **overrides)


@pytest.fixture
def settings() -> Settings:
    return make_settings()


# === TIME ===


class FakeClock:
    """Monotonic clock the test advances by hand."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingSleep:
    """Async sleep replacement that returns at once and remembers the delays."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def sleep() -> RecordingSleep:
    return RecordingSleep()


# === PROVIDERS ===


def make_provider(
    name: str,
    family: str = "gemini",
    priority: int = 1,
    api_key: str = VALID_KEY,
    model: str | None = None,
) -> ProviderConfig:
    return ProviderConfig(
        name=name, family=family, api_key=api_key, model=model, priority=priority
    )


class FakeVendorError(Exception):
    """Vendor failure with its classification attached."""

    def __init__(self, kind: str, message: str = "vendor error", retry_after_s: float | None = None):
        super().__init__(message)
        self.kind = kind
        self.retry_after_s = retry_after_s


class ScriptedAdapter(BaseProviderAdapter):
    """Adapter whose vendor replies come from a script.

    Each script item is either reply text or an exception to raise; once the
    script runs out every call returns ``default_reply``.
    """

    def __init__(
        self,
        config: ProviderConfig,
        *args: Any,
        script: list[Any] | None = None,
        vision: bool = False,
        default_reply: str = "ok",
        **kwargs: Any,
    ) -> None:
        super().__init__(config, *args, **kwargs)
        self.script = list(script or [])
        self.vision = vision
        self.default_reply = default_reply
        self.prompts: list[str] = []
        self.images: list[ImageInput] = []
        self.models: list[str] = []
        self.closed = False

    @property
    def family(self) -> str:
        return self._config.family

    @property
    def default_model(self) -> str:
        return "fake-model"

    @property
    def supports_vision(self) -> bool:
        return self.vision

    async def _call(self, prompt: str, model: str, **extra: Any) -> str:
        self.prompts.append(prompt)
        self.models.append(model)
        return self._next()

    async def _call_with_image(self, prompt: str, image: ImageInput, model: str) -> str:
        self.prompts.append(prompt)
        self.images.append(image)
        self.models.append(model)
        return self._next()

    def _next(self) -> str:
        if not self.script:
            return self.default_reply
        item = self.script.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    def classify_error(self, error: Exception) -> ClassifiedError:
        if isinstance(error, FakeVendorError):
            return ClassifiedError(error.kind, str(error), error.retry_after_s)
        return ClassifiedError("permanent", str(error))

    async def aclose(self) -> None:
        self.closed = True

    @property
    def call_count(self) -> int:
        return len(self.prompts)


class AdapterBook:
    """Adapter factory that hands out ScriptedAdapters and keeps them for assertions."""

    def __init__(self, scripts: dict[str, list[Any]] | None = None) -> None:
        self.scripts = scripts or {}
        self.adapters: dict[str, ScriptedAdapter] = {}
        self.broken: set[str] = set()

    def __call__(
        self,
        config: ProviderConfig,
        limiter: ConcurrencyLimiter,
        settings: Settings,
        sleep: Callable[[float], Any],
    ) -> ScriptedAdapter:
        if config.name in self.broken:
            raise RuntimeError(f"cannot build {config.name}")
        adapter = ScriptedAdapter(
            config,
            limiter,
            policy=retry_policy_from_settings(settings),
            sleep=sleep,
            script=self.scripts.get(config.name),
            vision=config.family == "gemini",
        )
        self.adapters[config.name] = adapter
        return adapter

    def calls(self, name: str) -> int:
        adapter = self.adapters.get(name)
        return adapter.call_count if adapter else 0


@pytest.fixture
def make_manager(clock: FakeClock, sleep: RecordingSleep):
    """Build a manager over the given providers with scripted adapters."""

    def _make(
        providers: list[ProviderConfig],
        scripts: dict[str, list[Any]] | None = None,
        settings: Settings | None = None,
    ) -> tuple[AIProviderManager, AdapterBook]:
        settings = settings or make_settings()
        book = AdapterBook(scripts)
        manager = AIProviderManager(
            ProviderRegistry(providers),
            ConcurrencyLimiter(settings.ai_max_concurrency),
            ProviderHealth(cooldown_s=settings.ai_provider_cooldown_s, clock=clock),
            settings,
            adapter_factory=book,
            sleep=sleep,
        )
        return manager, book

    return _make

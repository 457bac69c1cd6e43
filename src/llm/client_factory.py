# src/llm/client_factory.py — v3
"""Factory: instantiate a provider adapter from its config.

Called lazily by the manager the first time a provider is used. Adapter
classes are resolved by dotted path so vendor SDKs are only imported for
families that are actually configured.
"""

from __future__ import annotations

import asyncio
import importlib
import logging

from classboard.config.settings import Settings
from classboard.llm.base_client import BaseProviderAdapter
from classboard.llm.models import ProviderConfig
from classboard.llm.rate_limiter import ConcurrencyLimiter
from classboard.llm.retry import RetryPolicy, Sleep

logger = logging.getLogger(__name__)

# Registry of family → adapter class path (lazy import).
_FAMILY_REGISTRY: dict[str, str] = {
    "huggingface": "classboard.llm.adapters.huggingface_adapter.HuggingFaceAdapter",
    "gemini": "classboard.llm.adapters.gemini_adapter.GeminiAdapter",
}


class UnsupportedProviderError(ValueError):
    """Raised when a provider family is not registered."""


def retry_policy_from_settings(settings: Settings) -> RetryPolicy:
    return RetryPolicy(
        rate_limit_attempts=settings.ai_rate_limit_max_attempts,
        default_wait_s=settings.ai_rate_limit_default_wait_s,
        transient_attempts=settings.ai_transient_max_attempts,
    )


def create_adapter(
    config: ProviderConfig,
    limiter: ConcurrencyLimiter,
    settings: Settings,
    sleep: Sleep = asyncio.sleep,
) -> BaseProviderAdapter:
    """Instantiate the adapter for ``config.family``.

    Args:
        config: Provider instance (name, key, model).
        limiter: Shared concurrency limiter.
        settings: Application settings (retry budgets, endpoints).
        sleep: Awaitable used for retry waits.

    Returns:
        Configured adapter.

    Raises:
        UnsupportedProviderError: If the family is not registered.
    """
    if config.family not in _FAMILY_REGISTRY:
        raise UnsupportedProviderError(
            f"Unsupported provider family: {config.family!r}. "
            f"Available: {', '.join(sorted(_FAMILY_REGISTRY))}"
        )

    adapter_cls = _import_class(_FAMILY_REGISTRY[config.family])

    init_kwargs: dict[str, object] = {
        "limiter": limiter,
        "policy": retry_policy_from_settings(settings),
        "sleep": sleep,
    }
    if config.family == "huggingface":
        init_kwargs["base_url"] = settings.huggingface_base_url
        init_kwargs["timeout_s"] = settings.ai_request_timeout_s

    logger.debug(
        "Creating adapter: provider=%s, family=%s, model=%s",
        config.name, config.family, config.model,
    )
    return adapter_cls(config, **init_kwargs)


def register_family(name: str, class_path: str) -> None:
    """Register a custom adapter family.

    Args:
        name: Family identifier.
        class_path: Fully qualified class path implementing BaseProviderAdapter.
    """
    _FAMILY_REGISTRY[name] = class_path
    logger.info("Registered provider family: %s → %s", name, class_path)


def _import_class(class_path: str) -> type:
    """Dynamically import a class from its fully qualified path."""
    module_path, class_name = class_path.rsplit(".", 1)
    module = importlib.import_module(module_path)
    return getattr(module, class_name)

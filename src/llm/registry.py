# src/llm/registry.py — v1
"""Provider registry: the configured provider instances and their order.

Built once from Settings. Providers without a credential are left out rather
than failing startup, so an empty registry is a valid (if useless) state and
every downstream call reports "no providers available".
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from classboard.llm.models import ProviderConfig, ProviderFamily

if TYPE_CHECKING:
    from classboard.config.settings import Settings

logger = logging.getLogger(__name__)

HUGGINGFACE_PROVIDER_NAME = "HuggingFace"


def gemini_provider_name(slot: int) -> str:
    """Name of the Gemini instance in key slot ``slot`` (1-based)."""
    return f"Gemini-{slot}"


class ProviderRegistry:
    """Holds provider configs; only enable/disable mutate it after startup."""

    def __init__(self, providers: list[ProviderConfig] | None = None) -> None:
        self._providers: dict[str, ProviderConfig] = {}
        for provider in providers or []:
            if provider.name in self._providers:
                raise ValueError(f"Duplicate provider name: {provider.name!r}")
            self._providers[provider.name] = provider

    @classmethod
    def from_settings(cls, settings: Settings) -> ProviderRegistry:
        """Build the registry from environment-sourced settings."""
        providers: list[ProviderConfig] = []

        if settings.huggingface_api_key:
            providers.append(
                ProviderConfig(
                    name=HUGGINGFACE_PROVIDER_NAME,
                    family="huggingface",
                    api_key=settings.huggingface_api_key,
                    model=settings.huggingface_model,
                    priority=1,
                )
            )

        for slot, key in enumerate(settings.gemini_keys, start=1):
            if not key:
                continue
            providers.append(
                ProviderConfig(
                    name=gemini_provider_name(slot),
                    family="gemini",
                    api_key=key,
                    model=settings.gemini_model,
                    priority=slot + 1,
                )
            )

        overrides = settings.provider_priority_list
        if overrides:
            _apply_priority_overrides(providers, overrides)

        logger.info(
            "Loaded %d AI providers: %s",
            len(providers),
            ", ".join(p.name for p in sorted(providers, key=lambda p: p.priority)) or "none",
        )
        return cls(providers)

    # --- Queries ---

    def all(self) -> list[ProviderConfig]:
        """Every provider, active or not, in priority order."""
        return sorted(self._providers.values(), key=lambda p: p.priority)

    def list_active(self) -> list[ProviderConfig]:
        """Active providers in priority order (lower priority value first)."""
        return [p for p in self.all() if p.active]

    def list_by_family(self, family: ProviderFamily) -> list[ProviderConfig]:
        """Active providers of one vendor family, in priority order."""
        return [p for p in self.list_active() if p.family == family]

    def get(self, name: str) -> ProviderConfig | None:
        """Provider by name, or None when unknown."""
        return self._providers.get(name)

    def __len__(self) -> int:
        return len(self._providers)

    def __contains__(self, name: object) -> bool:
        return name in self._providers

    # --- Mutations ---

    def disable(self, name: str) -> None:
        """Take a provider out of rotation. Unknown names are logged and ignored."""
        self._set_active(name, False)

    def enable(self, name: str) -> None:
        """Put a provider back into rotation. Unknown names are logged and ignored."""
        self._set_active(name, True)

    def _set_active(self, name: str, active: bool) -> None:
        provider = self._providers.get(name)
        if provider is None:
            logger.warning("Cannot %s unknown provider %r", "enable" if active else "disable", name)
            return
        if provider.active == active:
            return
        provider.active = active
        logger.info("%s provider: %s", "Enabled" if active else "Disabled", name)

    def validate_credentials(self, min_length: int = 10) -> tuple[list[str], list[str]]:
        """Split provider names by whether their credential looks plausible.

        Returns:
            (valid, invalid) provider name lists, each in priority order.
        """
        valid: list[str] = []
        invalid: list[str] = []
        for provider in self.all():
            if provider.api_key and len(provider.api_key) > min_length:
                valid.append(provider.name)
            else:
                invalid.append(provider.name)
        return valid, invalid


def _apply_priority_overrides(providers: list[ProviderConfig], names: list[str]) -> None:
    """Move named providers to the front, in the given order; the rest keep theirs."""
    known = {p.name: p for p in providers}
    for position, name in enumerate(names):
        provider = known.get(name)
        if provider is None:
            logger.warning("PROVIDER_PRIORITY names unknown provider %r", name)
            continue
        provider.priority = position - len(names)

# src/llm/health.py — v1
"""Circuit breaker state for providers that hit rate or quota limits.

Owned by one orchestrator instance. Expiry is evaluated lazily whenever the
state is read, so no timers run in the background. The clock is injectable
for deterministic tests.
"""

from __future__ import annotations

import logging
import time
from typing import Callable

from classboard.llm.models import ProviderHealthState

logger = logging.getLogger(__name__)


class ProviderHealth:
    """Tracks which providers are cooling down after an exhaustion failure."""

    def __init__(
        self,
        cooldown_s: float = 5.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._cooldown_s = cooldown_s
        self._clock = clock
        self._unavailable_since: dict[str, float] = {}

    @property
    def cooldown_s(self) -> float:
        return self._cooldown_s

    def mark_unavailable(self, name: str) -> None:
        """Start a cooldown for ``name``.

        Idempotent: a provider already cooling down keeps its original start
        time, so concurrent failures never extend the window.
        """
        if not self.is_available(name):
            return
        self._unavailable_since[name] = self._clock()
        logger.warning(
            "Marked provider %s as unavailable for %.1fs",
            name, self._cooldown_s,
            extra={"data": {"provider": name, "cooldown_s": self._cooldown_s}},
        )

    def is_available(self, name: str) -> bool:
        """True unless ``name`` is inside its cooldown window."""
        since = self._unavailable_since.get(name)
        if since is None:
            return True
        if self._clock() - since >= self._cooldown_s:
            del self._unavailable_since[name]
            logger.info("Restored provider %s for retry", name)
            return True
        return False

    def unavailable(self) -> list[str]:
        """Names currently cooling down."""
        return [name for name in list(self._unavailable_since) if not self.is_available(name)]

    def state(self, name: str) -> ProviderHealthState:
        """Health view of a single provider."""
        available = self.is_available(name)
        return ProviderHealthState(
            name=name,
            available=available,
            unavailable_since=None if available else self._unavailable_since[name],
        )

    def states(self) -> list[ProviderHealthState]:
        """Snapshot of every provider still inside its cooldown."""
        return [self.state(name) for name in self.unavailable()]

    def reset(self, name: str | None = None) -> None:
        """Clear one provider's cooldown, or all of them."""
        if name is None:
            self._unavailable_since.clear()
        else:
            self._unavailable_since.pop(name, None)

# src/llm/retry.py — v2
"""Adapter-level retry: wait out vendor rate limits, surface everything else.

Adapters classify vendor exceptions into a small taxonomy; this module owns
the loop that decides whether to wait and try the same provider again.
Retrying across providers is the orchestrator's job, not this one's.
"""

from __future__ import annotations

import asyncio
import logging
import re
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from classboard.llm.models import VendorErrorKind

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[Any]]

_DURATION_PATTERN = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*(ms|s)?\s*$")


@dataclass(frozen=True)
class ClassifiedError:
    """A vendor failure mapped onto the shared taxonomy."""

    kind: VendorErrorKind
    message: str
    retry_after_s: float | None = None


class ProviderCallError(Exception):
    """A classified vendor failure that the adapter could not absorb."""

    def __init__(self, provider: str, error: ClassifiedError, attempts: int) -> None:
        self.provider = provider
        self.error = error
        self.attempts = attempts
        super().__init__(
            f"Provider '{provider}' failed after {attempts} attempt(s) "
            f"({error.kind}): {error.message}"
        )


@dataclass(frozen=True)
class RetryPolicy:
    """Attempt budgets for the retryable error kinds."""

    rate_limit_attempts: int = 3
    default_wait_s: float = 60.0
    transient_attempts: int = 1
    transient_delay_s: float = 1.0


def parse_retry_delay(value: object) -> float | None:
    """Parse a vendor retry hint ('54s', '1.5s', '250ms', '30', 30) into seconds."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value) if value >= 0 else None
    match = _DURATION_PATTERN.match(str(value))
    if not match:
        return None
    amount = float(match.group(1))
    return amount / 1000.0 if match.group(2) == "ms" else amount


def incremental_delay(base_s: float, attempt: int) -> float:
    """Linear backoff: attempt 1 waits base, attempt 2 waits 2×base, …"""
    return base_s * attempt


async def call_with_retry(
    fn: Callable[[], Awaitable[str]],
    classify: Callable[[Exception], ClassifiedError],
    *,
    provider: str,
    policy: RetryPolicy | None = None,
    sleep: Sleep = asyncio.sleep,
) -> tuple[str, int]:
    """Run ``fn`` until it succeeds or its failure is not worth another try.

    Rate-limited failures wait the vendor's retry-after (or the policy
    default) and try again, up to ``rate_limit_attempts``. Transient failures
    get ``transient_attempts``. Every other kind surfaces immediately.

    Returns:
        (text, attempts) from the successful call.

    Raises:
        ProviderCallError: With the last classified failure.
    """
    policy = policy or RetryPolicy()
    attempts = 0

    while True:
        attempts += 1
        try:
            return await fn(), attempts
        except asyncio.CancelledError:
            raise
        except Exception as e:  # noqa: BLE001
            error = classify(e)

        if error.kind == "rate_limited" and attempts < policy.rate_limit_attempts:
            delay = (
                error.retry_after_s
                if error.retry_after_s is not None
                else policy.default_wait_s
            )
        elif error.kind == "transient" and attempts < policy.transient_attempts:
            delay = incremental_delay(policy.transient_delay_s, attempts)
        else:
            raise ProviderCallError(provider, error, attempts)

        logger.warning(
            "Provider '%s' %s (attempt %d), retrying in %.1fs",
            provider, error.kind, attempts, delay,
            extra={"data": {"provider": provider, "error": error.message[:200]}},
        )
        await sleep(delay)

# src/llm/models.py — v2
"""Provider-layer types: configs, generation results, health and status.

Vendor SDK objects never cross this boundary; adapters translate them into
the types below.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

ProviderFamily = Literal["huggingface", "gemini"]

# Vendor failures, as classified by an adapter.
VendorErrorKind = Literal["rate_limited", "quota_exhausted", "transient", "permanent"]

# Everything a caller of the manager can see.
ErrorKind = Literal[
    "rate_limited",
    "quota_exhausted",
    "transient",
    "permanent",
    "no_providers",
    "all_failed",
    "not_found",
]

# Kinds that trip the shared circuit breaker.
EXHAUSTION_KINDS: frozenset[str] = frozenset({"rate_limited", "quota_exhausted"})


class ProviderConfig(BaseModel):
    """One credentialed provider instance."""

    name: str
    family: ProviderFamily
    api_key: str = Field(repr=False)
    model: str | None = None
    active: bool = True
    priority: int


class ImageInput(BaseModel):
    """Image payload for vision-enabled generation."""

    data: bytes
    media_type: str = "image/jpeg"


class GenerationResult(BaseModel):
    """Outcome of a single adapter call (after the adapter's own retries)."""

    success: bool
    text: str = ""
    provider: str
    model: str | None = None
    error_kind: VendorErrorKind | None = None
    error: str = ""
    attempts: int = 1
    latency_ms: int = 0


class ProviderAttempt(BaseModel):
    """One provider tried during a fallback run."""

    provider: str
    family: ProviderFamily
    success: bool
    error_kind: VendorErrorKind | None = None
    error: str = ""


class AIResult(BaseModel):
    """Result returned by the orchestrator to the content pipeline."""

    success: bool
    text: str = ""
    provider: str | None = None
    model: str | None = None
    error_kind: ErrorKind | None = None
    error: str = ""
    attempts: list[ProviderAttempt] = Field(default_factory=list)


class ProviderHealthState(BaseModel):
    """Circuit-breaker view of one provider."""

    name: str
    available: bool
    unavailable_since: float | None = None


class ProviderStatus(BaseModel):
    """Per-provider line of the manager status report."""

    name: str
    family: ProviderFamily
    model: str | None = None
    priority: int
    status: Literal["active", "failed", "disabled"]


class ManagerStatus(BaseModel):
    """Snapshot of the provider pool."""

    total_providers: int
    active_providers: int
    failed_providers: list[str] = Field(default_factory=list)
    providers: list[ProviderStatus] = Field(default_factory=list)
    in_flight: int = 0
    waiting: int = 0

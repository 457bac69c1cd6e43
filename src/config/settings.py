# src/config/settings.py — v2
"""Typed configuration loaded from .env via pydantic-settings.

Read once at process start. Provider credentials, orchestration limits,
cache sizing, pipeline policy and logging all live here; nothing is re-read
at runtime.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(Exception):
    """Raised when configuration is internally inconsistent."""


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === AI PROVIDERS ===
    huggingface_api_key: str = ""
    huggingface_model: str = "microsoft/DialoGPT-medium"
    huggingface_base_url: str = "https://router.huggingface.co/hf-inference/models"

    # One Gemini instance per configured key (Gemini-1 … Gemini-5)
    gemini_key_1: str = ""
    gemini_key_2: str = ""
    gemini_key_3: str = ""
    gemini_key_4: str = ""
    gemini_key_5: str = ""
    gemini_model: str = "gemini-1.5-flash"
    gemini_vision_model: str = "gemini-1.5-pro"

    # Comma-separated provider names tried first, in this order
    provider_priority: str = ""
    min_credential_length: int = 10

    # === Orchestration ===
    ai_max_concurrency: int = 10
    ai_provider_cooldown_s: float = 5.0
    ai_rate_limit_max_attempts: int = 3
    ai_rate_limit_default_wait_s: float = 60.0
    ai_transient_max_attempts: int = 1
    ai_request_timeout_s: float = 30.0

    # === Response cache ===
    ai_cache_enabled: bool = True
    ai_cache_max_entries: int = 1024

    # === Content pipeline ===
    format_max_attempts: int = 3
    format_backoff_s: float = 1.0
    format_description_policy: Literal["title_only", "structured"] = "title_only"
    pipeline_timeout_s: float = 30.0

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "json"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 30

    # --- Validators ---

    @field_validator(
        "ai_max_concurrency",
        "ai_rate_limit_max_attempts",
        "ai_transient_max_attempts",
    )
    @classmethod
    def validate_positive(cls, v: int, info) -> int:  # noqa: N805
        if v < 1:
            raise ValueError(f"{info.field_name} must be >= 1")
        return v

    @field_validator(
        "ai_provider_cooldown_s",
        "ai_rate_limit_default_wait_s",
        "format_backoff_s",
        "ai_cache_max_entries",
    )
    @classmethod
    def validate_non_negative(cls, v: float, info) -> float:  # noqa: N805
        if v < 0:
            raise ValueError(f"{info.field_name} must be >= 0")
        return v

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Cross-field rules that a single field validator cannot express."""
        errors: list[str] = []

        if self.format_max_attempts < 1:
            errors.append("FORMAT_MAX_ATTEMPTS must be >= 1")

        if self.pipeline_timeout_s <= 0:
            errors.append("PIPELINE_TIMEOUT_S must be > 0")

        if self.ai_request_timeout_s <= 0:
            errors.append("AI_REQUEST_TIMEOUT_S must be > 0")

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self

    # --- Helpers ---

    @property
    def gemini_keys(self) -> list[str]:
        """Gemini credentials in slot order; empty slots kept as ''."""
        return [
            self.gemini_key_1,
            self.gemini_key_2,
            self.gemini_key_3,
            self.gemini_key_4,
            self.gemini_key_5,
        ]

    @property
    def provider_priority_list(self) -> list[str]:
        """Parse comma-separated provider priority override."""
        return [p.strip() for p in self.provider_priority.split(",") if p.strip()]


def load_settings(**overrides: object) -> Settings:
    """Load settings from .env with optional overrides.

    Args:
        **overrides: Field-level overrides (for testing or embedding).

    Returns:
        Validated Settings instance.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]

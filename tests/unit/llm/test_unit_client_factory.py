# tests/unit/llm/test_unit_client_factory.py — v1
"""Tests for llm/client_factory.py — family → adapter resolution."""

from __future__ import annotations

import pytest

from classboard.llm.adapters.gemini_adapter import GeminiAdapter
from classboard.llm.adapters.huggingface_adapter import HuggingFaceAdapter
from classboard.llm.client_factory import (
    UnsupportedProviderError,
    create_adapter,
    register_family,
    retry_policy_from_settings,
)
from classboard.llm.models import ProviderConfig
from classboard.llm.rate_limiter import ConcurrencyLimiter

from conftest import make_provider, make_settings


class TestCreateAdapter:
    def test_gemini(self):
        adapter = create_adapter(make_provider("Gemini-1"), ConcurrencyLimiter(), make_settings())
        assert isinstance(adapter, GeminiAdapter)
        assert adapter.provider_name == "Gemini-1"

    def test_huggingface_gets_endpoint(self):
        settings = make_settings(huggingface_base_url="https://example.test/models/")
        adapter = create_adapter(
            make_provider("HuggingFace", "huggingface"), ConcurrencyLimiter(), settings
        )
        assert isinstance(adapter, HuggingFaceAdapter)
        assert adapter._base_url == "https://example.test/models"

    def test_unknown_family(self):
        config = ProviderConfig.model_construct(
            name="X", family="ollama", api_key="k", model=None, active=True, priority=1
        )
        with pytest.raises(UnsupportedProviderError, match="ollama"):
            create_adapter(config, ConcurrencyLimiter(), make_settings())

    def test_register_family(self, monkeypatch):
        from classboard.llm import client_factory

        monkeypatch.setitem(client_factory._FAMILY_REGISTRY, "gemini", "conftest.ScriptedAdapter")
        adapter = create_adapter(make_provider("Gemini-1"), ConcurrencyLimiter(), make_settings())
        assert type(adapter).__name__ == "ScriptedAdapter"

    def test_register_family_adds_entry(self, monkeypatch):
        from classboard.llm import client_factory

        monkeypatch.setattr(client_factory, "_FAMILY_REGISTRY", dict(client_factory._FAMILY_REGISTRY))
        register_family("custom", "conftest.ScriptedAdapter")
        assert client_factory._FAMILY_REGISTRY["custom"] == "conftest.ScriptedAdapter"


class TestRetryPolicy:
    def test_from_settings(self):
        policy = retry_policy_from_settings(
            make_settings(ai_rate_limit_max_attempts=5, ai_rate_limit_default_wait_s=10)
        )
        assert policy.rate_limit_attempts == 5
        assert policy.default_wait_s == 10
        assert policy.transient_attempts == 1

# tests/unit/llm/test_unit_registry.py — v1
"""Tests for llm/registry.py — provider configs, ordering, enable/disable."""

from __future__ import annotations

import logging

import pytest

from classboard.llm.registry import ProviderRegistry, gemini_provider_name

from conftest import make_provider, make_settings


class TestFromSettings:
    def test_empty_settings_give_empty_registry(self):
        registry = ProviderRegistry.from_settings(make_settings())
        assert len(registry) == 0
        assert registry.list_active() == []

    def test_builds_all_configured_providers(self):
        registry = ProviderRegistry.from_settings(
            make_settings(huggingface_api_key="hf-key", gemini_key_1="g1", gemini_key_3="g3")
        )
        names = [p.name for p in registry.list_active()]
        assert names == ["HuggingFace", "Gemini-1", "Gemini-3"]

    def test_priorities_follow_slots(self):
        registry = ProviderRegistry.from_settings(
            make_settings(huggingface_api_key="hf", gemini_key_2="g2")
        )
        assert registry.get("HuggingFace").priority == 1
        assert registry.get("Gemini-2").priority == 3

    def test_models_from_settings(self):
        registry = ProviderRegistry.from_settings(
            make_settings(gemini_key_1="g1", gemini_model="gemini-2.0-flash")
        )
        assert registry.get("Gemini-1").model == "gemini-2.0-flash"
        assert registry.get("Gemini-1").family == "gemini"

    def test_priority_override(self):
        registry = ProviderRegistry.from_settings(
            make_settings(
                huggingface_api_key="hf",
                gemini_key_1="g1",
                gemini_key_2="g2",
                provider_priority="Gemini-2,Gemini-1",
            )
        )
        assert [p.name for p in registry.list_active()] == ["Gemini-2", "Gemini-1", "HuggingFace"]

    def test_unknown_override_ignored(self, caplog):
        with caplog.at_level(logging.WARNING):
            registry = ProviderRegistry.from_settings(
                make_settings(gemini_key_1="g1", provider_priority="Nope")
            )
        assert [p.name for p in registry.list_active()] == ["Gemini-1"]
        assert "Nope" in caplog.text

    def test_provider_name(self):
        assert gemini_provider_name(4) == "Gemini-4"


class TestQueries:
    def setup_method(self):
        self.registry = ProviderRegistry([
            make_provider("Gemini-2", "gemini", priority=3),
            make_provider("HuggingFace", "huggingface", priority=1),
            make_provider("Gemini-1", "gemini", priority=2),
        ])

    def test_list_active_sorted(self):
        assert [p.name for p in self.registry.list_active()] == [
            "HuggingFace", "Gemini-1", "Gemini-2",
        ]

    def test_list_by_family(self):
        assert [p.name for p in self.registry.list_by_family("gemini")] == ["Gemini-1", "Gemini-2"]

    def test_get_unknown(self):
        assert self.registry.get("Claude") is None

    def test_contains(self):
        assert "Gemini-1" in self.registry
        assert "Claude" not in self.registry

    def test_duplicate_names_rejected(self):
        with pytest.raises(ValueError, match="Duplicate"):
            ProviderRegistry([make_provider("A"), make_provider("A")])

    def test_key_hidden_from_repr(self):
        assert "test-key" not in repr(self.registry.get("Gemini-1"))


class TestEnableDisable:
    def setup_method(self):
        self.registry = ProviderRegistry([
            make_provider("Gemini-1", priority=1),
            make_provider("Gemini-2", priority=2),
        ])

    def test_disable_removes_from_active(self):
        self.registry.disable("Gemini-1")
        assert [p.name for p in self.registry.list_active()] == ["Gemini-2"]
        assert [p.name for p in self.registry.list_by_family("gemini")] == ["Gemini-2"]
        assert len(self.registry.all()) == 2

    def test_idempotent(self):
        self.registry.disable("Gemini-1")
        self.registry.disable("Gemini-1")
        self.registry.enable("Gemini-1")
        self.registry.enable("Gemini-1")
        assert len(self.registry.list_active()) == 2

    def test_unknown_name_is_logged_not_raised(self, caplog):
        with caplog.at_level(logging.WARNING):
            self.registry.disable("Ghost")
        assert "Ghost" in caplog.text


class TestValidateCredentials:
    def test_splits_by_length(self):
        registry = ProviderRegistry([
            make_provider("Good", api_key="k" * 11, priority=1),
            make_provider("Short", api_key="k" * 10, priority=2),
        ])
        valid, invalid = registry.validate_credentials(min_length=10)
        assert valid == ["Good"]
        assert invalid == ["Short"]

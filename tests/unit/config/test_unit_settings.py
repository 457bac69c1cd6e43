# tests/unit/config/test_unit_settings.py — v1
"""Tests for config/settings.py — typed Settings and validation rules."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from classboard.config.settings import ConfigurationError, Settings, load_settings


class TestSettingsDefaults:
    def test_no_credentials_by_default(self):
        s = Settings(_env_file=None)
        assert s.huggingface_api_key == ""
        assert s.gemini_keys == ["", "", "", "", ""]

    def test_default_models(self):
        s = Settings(_env_file=None)
        assert s.huggingface_model == "microsoft/DialoGPT-medium"
        assert s.gemini_model == "gemini-1.5-flash"
        assert s.gemini_vision_model == "gemini-1.5-pro"

    def test_default_orchestration(self):
        s = Settings(_env_file=None)
        assert s.ai_max_concurrency == 10
        assert s.ai_provider_cooldown_s == 5.0
        assert s.ai_rate_limit_max_attempts == 3
        assert s.ai_rate_limit_default_wait_s == 60.0
        assert s.ai_transient_max_attempts == 1

    def test_default_pipeline(self):
        s = Settings(_env_file=None)
        assert s.format_max_attempts == 3
        assert s.format_description_policy == "title_only"
        assert s.pipeline_timeout_s == 30.0

    def test_default_cache(self):
        s = Settings(_env_file=None)
        assert s.ai_cache_enabled is True
        assert s.ai_cache_max_entries == 1024


class TestSettingsEnv:
    def test_keys_from_environment(self, monkeypatch):
        monkeypatch.setenv("GEMINI_KEY_2", "abc")
        monkeypatch.setenv("HUGGINGFACE_API_KEY", "hf")
        s = Settings(_env_file=None)
        assert s.gemini_keys[1] == "abc"
        assert s.huggingface_api_key == "hf"

    def test_env_file(self, tmp_path):
        env = tmp_path / ".env"
        env.write_text("GEMINI_KEY_1=from-file\nAI_MAX_CONCURRENCY=4\n")
        s = Settings(_env_file=str(env))
        assert s.gemini_key_1 == "from-file"
        assert s.ai_max_concurrency == 4


class TestSettingsValidation:
    def test_concurrency_must_be_positive(self):
        with pytest.raises(ValidationError, match="ai_max_concurrency"):
            Settings(_env_file=None, ai_max_concurrency=0)

    def test_negative_cooldown_rejected(self):
        with pytest.raises(ValidationError, match="ai_provider_cooldown_s"):
            Settings(_env_file=None, ai_provider_cooldown_s=-1)

    def test_format_attempts(self):
        with pytest.raises(ConfigurationError, match="FORMAT_MAX_ATTEMPTS"):
            Settings(_env_file=None, format_max_attempts=0)

    def test_pipeline_timeout(self):
        with pytest.raises(ConfigurationError, match="PIPELINE_TIMEOUT_S"):
            Settings(_env_file=None, pipeline_timeout_s=0)

    def test_errors_are_collected(self):
        with pytest.raises(ConfigurationError) as exc_info:
            Settings(_env_file=None, format_max_attempts=0, ai_request_timeout_s=0)
        assert "FORMAT_MAX_ATTEMPTS" in str(exc_info.value)
        assert "AI_REQUEST_TIMEOUT_S" in str(exc_info.value)

    def test_unknown_policy_rejected(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, format_description_policy="everything")


class TestHelpers:
    def test_priority_list(self):
        s = Settings(_env_file=None, provider_priority=" Gemini-2 , HuggingFace,, ")
        assert s.provider_priority_list == ["Gemini-2", "HuggingFace"]

    def test_priority_list_empty(self):
        assert Settings(_env_file=None).provider_priority_list == []

    def test_load_settings_overrides(self):
        s = load_settings(_env_file=None, gemini_key_3="k3")
        assert s.gemini_keys[2] == "k3"

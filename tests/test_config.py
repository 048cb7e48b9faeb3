"""
Tests for configuration.
"""

import logging

from charisma_quiz.config import Config, ModelConfig, check_credentials


class TestModelConfig:
    """Tests for model selection."""

    def test_provider_default_model(self):
        models = ModelConfig(provider="deepseek", model="")
        assert models.get_model() == "deepseek-chat"

    def test_model_override(self):
        models = ModelConfig(provider="gemini", model="gemini-pro")
        assert models.get_model() == "gemini-pro"

    def test_shared_key_wins(self, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "provider-key")
        models = ModelConfig(provider="gemini", api_key="shared-key")

        assert models.get_api_key() == "shared-key"

    def test_provider_key_fallback(self, monkeypatch):
        monkeypatch.setenv("ANTHROPIC_API_KEY", "anthropic-key")
        models = ModelConfig(provider="gemini", api_key="")

        assert models.get_api_key("claude") == "anthropic-key"


class TestPresets:
    """Tests for config presets."""

    def test_fast_mode(self):
        cfg = Config.fast_mode()

        assert cfg.quiz.question_count == 3
        assert cfg.funnel.confirmation_seconds < 1

    def test_offline_mode(self):
        assert Config.offline_mode().models.provider == "mock"

    def test_funnel_defaults(self):
        cfg = Config()

        assert cfg.funnel.sales_url.startswith("https://")


class TestCheckCredentials:
    """Tests for the missing-credential check."""

    def test_missing_key_logs_error(self, monkeypatch, caplog):
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        cfg = Config()
        cfg.models.api_key = ""

        with caplog.at_level(logging.ERROR):
            assert not check_credentials(cfg, "gemini")

        assert "GEMINI_API_KEY" in caplog.text

    def test_key_present(self, monkeypatch, caplog):
        monkeypatch.setenv("DEEPSEEK_API_KEY", "k")
        cfg = Config()
        cfg.models.api_key = ""

        assert check_credentials(cfg, "deepseek")
        assert caplog.text == ""

    def test_mock_needs_no_key(self):
        cfg = Config.offline_mode()
        cfg.models.api_key = ""

        assert check_credentials(cfg)

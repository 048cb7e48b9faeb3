"""
charisma-quiz configuration

All magic numbers, credentials, model choices, and funnel links live here.
Environment variables override defaults for deployment flexibility.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Literal, Optional

logger = logging.getLogger(__name__)


@dataclass
class ModelConfig:
    """Generative model selection"""
    provider: Literal["gemini", "claude", "deepseek", "cloudflare", "mock"] = os.getenv("QUIZ_PROVIDER", "gemini")
    model: str = os.getenv("QUIZ_MODEL", "")  # Empty = use provider default
    api_key: str = os.getenv("API_KEY", "")  # Process-wide credential, read once
    temperature: float = float(os.getenv("QUIZ_TEMPERATURE", "0.8"))

    # Default models per provider
    PROVIDER_DEFAULTS = {
        "gemini": "gemini-2.5-flash",
        "claude": "claude-sonnet-4-20250514",
        "deepseek": "deepseek-chat",
        "cloudflare": "@cf/meta/llama-4-scout-17b-16e-instruct",
        "mock": "mock-model-v1",
    }

    # Provider-specific credential variables, used when API_KEY is unset
    PROVIDER_KEY_ENV = {
        "gemini": "GEMINI_API_KEY",
        "claude": "ANTHROPIC_API_KEY",
        "deepseek": "DEEPSEEK_API_KEY",
        "cloudflare": "CLOUDFLARE_API_TOKEN",
    }

    def get_model(self) -> str:
        """Get model, falling back to provider default."""
        return self.model or self.PROVIDER_DEFAULTS.get(self.provider, "")

    def get_api_key(self, provider: Optional[str] = None) -> str:
        """The credential a provider will use, or empty string."""
        if self.api_key:
            return self.api_key
        env_name = self.PROVIDER_KEY_ENV.get(provider or self.provider)
        return os.getenv(env_name, "") if env_name else ""


@dataclass
class QuizConfig:
    """Quiz shape"""
    question_count: int = int(os.getenv("QUIZ_QUESTION_COUNT", "5"))
    max_tokens: int = int(os.getenv("QUIZ_MAX_TOKENS", "4096"))


@dataclass
class FunnelConfig:
    """Sales redirect and share action"""
    sales_url: str = os.getenv("SALES_URL", "https://pay.kiwify.com.br/ZXa3bQ4")
    share_url: str = os.getenv("SHARE_URL", "")  # Where the quiz is hosted; sharing needs it
    share_title: str = "Mestre da Conversa"
    share_text: str = "Descubra os E-books Psicológicos que Transformam Qualquer Conversa."
    confirmation_seconds: float = float(os.getenv("SHARE_CONFIRM_SECONDS", "2.0"))


@dataclass
class LoggingConfig:
    """Log output"""
    level: str = os.getenv("LOG_LEVEL", "WARNING").upper()


@dataclass
class Config:
    """Master config, import this"""
    models: ModelConfig = field(default_factory=ModelConfig)
    quiz: QuizConfig = field(default_factory=QuizConfig)
    funnel: FunnelConfig = field(default_factory=FunnelConfig)
    log: LoggingConfig = field(default_factory=LoggingConfig)

    # Quick presets
    @classmethod
    def fast_mode(cls) -> "Config":
        """For development: short quiz, instant share confirmation"""
        cfg = cls()
        cfg.quiz.question_count = 3
        cfg.funnel.confirmation_seconds = 0.1
        return cfg

    @classmethod
    def offline_mode(cls) -> "Config":
        """No network: mock provider"""
        cfg = cls()
        cfg.models.provider = "mock"
        cfg.models.model = ""
        return cfg


def check_credentials(cfg: "Config", provider: Optional[str] = None) -> bool:
    """
    Log once when a provider has no credential.

    Never raises: a missing key surfaces later as a failed provider call.

    Args:
        cfg: Configuration to inspect
        provider: Provider to check (defaults to the configured one)
    """
    provider = provider or cfg.models.provider
    if provider == "mock":
        return True

    if cfg.models.get_api_key(provider):
        return True

    env_name = cfg.models.PROVIDER_KEY_ENV.get(provider, "API_KEY")
    logger.error(
        "API key is missing for provider %r: set API_KEY or %s",
        provider,
        env_name,
    )
    return False


# Singleton
config = Config()

"""
Generative model providers for charisma-quiz

Supports multiple providers with a common interface.
Providers: Gemini (Google), Claude (Anthropic), DeepSeek, Cloudflare Workers AI
"""

from .base import (
    ModelProvider, ModelResponse, ProviderError, RateLimitError,
    AuthenticationError, ToolCallError, ToolDefinition, ToolCallResult
)
from .gemini import GeminiProvider
from .claude import ClaudeProvider
from .deepseek import DeepSeekProvider
from .cloudflare import CloudflareAIProvider
from .mock import MockProvider

__all__ = [
    # Base classes and types
    "ModelProvider",
    "ModelResponse",
    "ProviderError",
    "RateLimitError",
    "AuthenticationError",
    "ToolCallError",
    "ToolDefinition",
    "ToolCallResult",
    # Providers
    "GeminiProvider",
    "ClaudeProvider",
    "DeepSeekProvider",
    "CloudflareAIProvider",
    "MockProvider",
    "PROVIDERS",
    "get_provider",
]


PROVIDERS = {
    "gemini": GeminiProvider,
    "claude": ClaudeProvider,
    "deepseek": DeepSeekProvider,
    "cloudflare": CloudflareAIProvider,
    "mock": MockProvider,
}


def get_provider(name: str, **kwargs) -> ModelProvider:
    """
    Factory function to get a provider by name.

    Args:
        name: Provider name ('gemini', 'claude', 'deepseek', 'cloudflare', 'mock')
        **kwargs: Provider-specific options

    Returns:
        Configured ModelProvider instance

    Raises:
        ValueError: If provider name is unknown
    """
    if name not in PROVIDERS:
        raise ValueError(f"Unknown provider: {name}. Valid options: {list(PROVIDERS.keys())}")

    return PROVIDERS[name](**kwargs)

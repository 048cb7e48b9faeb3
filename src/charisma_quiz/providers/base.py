"""
Base protocol for generative model providers

Defines the interface every provider implements so the quiz can ask for
questions and performance analysis without caring which model answers.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Optional, Any, Dict


class ProviderError(Exception):
    """Base exception for provider errors."""
    pass


class RateLimitError(ProviderError):
    """Rate limit exceeded."""
    pass


class AuthenticationError(ProviderError):
    """Missing or rejected credential."""
    pass


class ToolCallError(ProviderError):
    """Structured output could not be requested or parsed."""
    pass


@dataclass
class ToolDefinition:
    """
    A structured-output contract the model is asked to fill.

    Providers with function calling send it as a tool and force its use;
    providers with native JSON schemas send `parameters` as the response schema.
    """
    name: str
    description: str
    parameters: Dict[str, Any]  # JSON Schema


@dataclass
class ToolCallResult:
    """Structured output returned by the model."""
    tool_name: str
    arguments: Dict[str, Any]
    raw_response: Optional[Any] = None


@dataclass
class ModelResponse:
    """Response from a generative model."""
    content: str
    model: str
    provider: str
    usage: dict = field(default_factory=dict)
    raw_response: Optional[Any] = None
    tool_calls: List[ToolCallResult] = field(default_factory=list)

    @property
    def input_tokens(self) -> int:
        return self.usage.get("input_tokens", 0)

    @property
    def output_tokens(self) -> int:
        return self.usage.get("output_tokens", 0)

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens

    @property
    def has_tool_call(self) -> bool:
        """Whether the response carries structured output."""
        return len(self.tool_calls) > 0


def classify_error(provider_name: str, error: Exception) -> ProviderError:
    """
    Map an SDK exception onto the provider error hierarchy.

    SDKs disagree on exception types, so the message is inspected the same
    way for every provider.
    """
    if isinstance(error, ProviderError):
        return error

    error_str = str(error).lower()

    if "rate" in error_str or "429" in error_str or "quota" in error_str:
        return RateLimitError(f"{provider_name} rate limit exceeded: {error}")

    if "auth" in error_str or "401" in error_str or "api key" in error_str:
        return AuthenticationError(f"{provider_name} authentication failed: {error}")

    return ProviderError(f"{provider_name} API error: {error}")


class ModelProvider(ABC):
    """
    Abstract base class for generative model providers.

    Providers must implement generate() for plain prompts and may implement
    generate_with_tools() for schema-constrained output.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider name (e.g., 'gemini', 'claude', 'deepseek')."""
        pass

    @property
    @abstractmethod
    def default_model(self) -> str:
        """Default model ID for this provider."""
        pass

    @property
    def supports_tools(self) -> bool:
        """Whether this provider supports structured output."""
        return False

    @abstractmethod
    async def generate(
        self,
        prompt: str,
        *,
        system: Optional[str] = None,
        model: Optional[str] = None,
        max_tokens: int = 4096,
        temperature: float = 0.7,
        **kwargs
    ) -> ModelResponse:
        """
        Generate a response from the model.

        Args:
            prompt: The user prompt
            system: Optional system prompt
            model: Model ID (uses default if not specified)
            max_tokens: Maximum tokens to generate
            temperature: Sampling temperature
            **kwargs: Provider-specific options

        Returns:
            ModelResponse with generated content

        Raises:
            ProviderError: On API errors
            RateLimitError: When rate limited
            AuthenticationError: On missing or rejected credentials
        """
        pass

    async def generate_with_tools(
        self,
        prompt: str,
        tools: List[ToolDefinition],
        *,
        system: Optional[str] = None,
        model: Optional[str] = None,
        max_tokens: int = 4096,
        temperature: float = 0.7,
        tool_choice: Optional[str] = None,
        **kwargs
    ) -> ModelResponse:
        """
        Generate a response constrained by a structured-output schema.

        Args:
            prompt: The user prompt
            tools: Schemas the model may fill
            system: Optional system prompt
            model: Model ID (uses default if not specified)
            max_tokens: Maximum tokens to generate
            temperature: Sampling temperature
            tool_choice: "auto", "any", or a specific tool name to force

        Returns:
            ModelResponse with tool_calls populated if the model filled a schema

        Raises:
            ProviderError: On API errors
            ToolCallError: If structured output is not supported
        """
        raise ToolCallError(f"{self.name} provider does not support structured output")

    async def close(self):
        """Release any network resources held by the provider."""
        return None

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(model={self.default_model!r})"

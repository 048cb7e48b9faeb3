"""
Claude (Anthropic) provider implementation

Uses the Anthropic SDK. Structured output is obtained by forcing the model
to call a tool whose input schema is the quiz schema.
"""

import os
from typing import Optional, List

from .base import (
    ModelProvider, ModelResponse, ProviderError, AuthenticationError,
    ToolDefinition, ToolCallResult, classify_error
)
from .tools import tools_to_anthropic


class ClaudeProvider(ModelProvider):
    """
    Anthropic Claude provider.

    API key is read from:
    1. Constructor argument
    2. ANTHROPIC_API_KEY environment variable
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        default_model: str = "claude-sonnet-4-20250514",
    ):
        self._api_key = api_key or os.getenv("ANTHROPIC_API_KEY")
        self._default_model = default_model
        self._client = None

    def _get_client(self):
        """Lazy initialization of Anthropic client."""
        if self._client is None:
            if not self._api_key:
                raise AuthenticationError(
                    "No Anthropic API key provided. Set ANTHROPIC_API_KEY or API_KEY."
                )
            try:
                import anthropic
                self._client = anthropic.AsyncAnthropic(api_key=self._api_key)
            except ImportError:
                raise ProviderError("anthropic package not installed. Run: pip install anthropic")
        return self._client

    @property
    def name(self) -> str:
        return "claude"

    @property
    def default_model(self) -> str:
        return self._default_model

    @property
    def supports_tools(self) -> bool:
        return True

    def _build_request(
        self,
        prompt: str,
        system: Optional[str],
        model: Optional[str],
        max_tokens: int,
        temperature: Optional[float],
    ) -> dict:
        request_kwargs = {
            "model": model or self._default_model,
            "max_tokens": max_tokens,
            "messages": [{"role": "user", "content": prompt}],
        }
        if system:
            request_kwargs["system"] = system
        # Claude uses a 0-1 scale
        if temperature is not None:
            request_kwargs["temperature"] = min(1.0, max(0.0, temperature))
        return request_kwargs

    @staticmethod
    def _usage(response) -> dict:
        return {
            "input_tokens": response.usage.input_tokens,
            "output_tokens": response.usage.output_tokens,
        }

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
        """Generate a response using Claude."""
        client = self._get_client()
        request_kwargs = self._build_request(prompt, system, model, max_tokens, temperature)

        try:
            response = await client.messages.create(**request_kwargs)
        except Exception as e:
            raise classify_error("Claude", e) from e

        content = ""
        for block in response.content or []:
            if getattr(block, "type", None) == "text":
                content += block.text

        return ModelResponse(
            content=content,
            model=response.model,
            provider=self.name,
            usage=self._usage(response),
            raw_response=response,
        )

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
        """Generate a response using Claude with forced tool use."""
        client = self._get_client()
        request_kwargs = self._build_request(prompt, system, model, max_tokens, temperature)
        request_kwargs["tools"] = tools_to_anthropic(tools)

        if tool_choice == "auto":
            request_kwargs["tool_choice"] = {"type": "auto"}
        elif tool_choice == "any":
            request_kwargs["tool_choice"] = {"type": "any"}
        elif tool_choice:
            request_kwargs["tool_choice"] = {"type": "tool", "name": tool_choice}

        try:
            response = await client.messages.create(**request_kwargs)
        except Exception as e:
            raise classify_error("Claude", e) from e

        content = ""
        tool_calls = []
        for block in response.content or []:
            block_type = getattr(block, "type", None)
            if block_type == "text":
                content += block.text
            elif block_type == "tool_use":
                tool_calls.append(ToolCallResult(
                    tool_name=block.name,
                    arguments=block.input,
                    raw_response=block,
                ))

        return ModelResponse(
            content=content,
            model=response.model,
            provider=self.name,
            usage=self._usage(response),
            raw_response=response,
            tool_calls=tool_calls,
        )

"""
DeepSeek provider implementation

DeepSeek uses an OpenAI-compatible API; structured output goes through
forced function calling.
"""

import os
import json
from typing import Optional, List

from .base import (
    ModelProvider, ModelResponse, ProviderError, AuthenticationError,
    ToolCallError, ToolDefinition, ToolCallResult, classify_error
)
from .tools import tools_to_openai


class DeepSeekProvider(ModelProvider):
    """
    DeepSeek provider.

    API key is read from:
    1. Constructor argument
    2. DEEPSEEK_API_KEY environment variable
    """

    BASE_URL = "https://api.deepseek.com"

    def __init__(
        self,
        api_key: Optional[str] = None,
        default_model: str = "deepseek-chat",
        base_url: Optional[str] = None,
    ):
        self._api_key = api_key or os.getenv("DEEPSEEK_API_KEY")
        self._default_model = default_model
        self._base_url = base_url or self.BASE_URL
        self._client = None

    def _get_client(self):
        """Lazy initialization of OpenAI client for DeepSeek."""
        if self._client is None:
            if not self._api_key:
                raise AuthenticationError(
                    "No DeepSeek API key provided. Set DEEPSEEK_API_KEY or API_KEY."
                )
            try:
                from openai import AsyncOpenAI
                self._client = AsyncOpenAI(
                    api_key=self._api_key,
                    base_url=self._base_url,
                )
            except ImportError:
                raise ProviderError("openai package not installed. Run: pip install openai")
        return self._client

    @property
    def name(self) -> str:
        return "deepseek"

    @property
    def default_model(self) -> str:
        return self._default_model

    @property
    def supports_tools(self) -> bool:
        return True

    @staticmethod
    def _messages(prompt: str, system: Optional[str]) -> list:
        messages = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})
        return messages

    @staticmethod
    def _usage(response) -> dict:
        if not response.usage:
            return {}
        return {
            "input_tokens": response.usage.prompt_tokens,
            "output_tokens": response.usage.completion_tokens,
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
        """Generate a response using DeepSeek in JSON mode."""
        client = self._get_client()
        model = model or self._default_model

        try:
            response = await client.chat.completions.create(
                model=model,
                messages=self._messages(prompt, system),
                max_tokens=max_tokens,
                temperature=temperature,
                response_format={"type": "json_object"},
            )
        except Exception as e:
            raise classify_error("DeepSeek", e) from e

        content = ""
        if response.choices and response.choices[0].message:
            content = response.choices[0].message.content or ""

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
        """Generate a response using DeepSeek with forced function calling."""
        client = self._get_client()

        request_kwargs = {
            "model": model or self._default_model,
            "messages": self._messages(prompt, system),
            "max_tokens": max_tokens,
            "temperature": temperature,
            "tools": tools_to_openai(tools),
        }

        if tool_choice == "auto":
            request_kwargs["tool_choice"] = "auto"
        elif tool_choice == "any":
            request_kwargs["tool_choice"] = "required"
        elif tool_choice:
            request_kwargs["tool_choice"] = {"type": "function", "function": {"name": tool_choice}}

        try:
            response = await client.chat.completions.create(**request_kwargs)
        except Exception as e:
            raise classify_error("DeepSeek", e) from e

        content = ""
        tool_calls = []

        if response.choices and response.choices[0].message:
            msg = response.choices[0].message
            content = msg.content or ""

            for tc in msg.tool_calls or []:
                try:
                    args = json.loads(tc.function.arguments)
                except json.JSONDecodeError as e:
                    raise ToolCallError(f"DeepSeek returned invalid tool arguments: {e}") from e

                tool_calls.append(ToolCallResult(
                    tool_name=tc.function.name,
                    arguments=args,
                    raw_response=tc,
                ))

        return ModelResponse(
            content=content,
            model=response.model,
            provider=self.name,
            usage=self._usage(response),
            raw_response=response,
            tool_calls=tool_calls,
        )

"""
Cloudflare Workers AI provider implementation

Talks to the Workers AI REST API with httpx. Structured output uses the
JSON-mode `response_format` with the requested schema.
"""

import os
import json
from typing import Optional, List

import httpx

from .base import (
    ModelProvider, ModelResponse, ProviderError, RateLimitError,
    AuthenticationError, ToolCallError, ToolDefinition, ToolCallResult
)
from .tools import select_tool


class CloudflareAIProvider(ModelProvider):
    """
    Cloudflare Workers AI provider.

    Requires:
    1. CLOUDFLARE_API_TOKEN - API token with Workers AI permissions
    2. CLOUDFLARE_ACCOUNT_ID - Your Cloudflare account ID
    """

    BASE_URL = "https://api.cloudflare.com/client/v4/accounts"

    def __init__(
        self,
        api_token: Optional[str] = None,
        account_id: Optional[str] = None,
        default_model: str = "@cf/meta/llama-4-scout-17b-16e-instruct",
        api_key: Optional[str] = None,
    ):
        # api_key is accepted so the process-wide credential can be passed uniformly
        self._api_token = api_token or api_key or os.getenv("CLOUDFLARE_API_TOKEN")
        self._account_id = account_id or os.getenv("CLOUDFLARE_ACCOUNT_ID")
        self._default_model = default_model
        self._client = None

    def _get_client(self) -> httpx.AsyncClient:
        """Lazy initialization of HTTP client."""
        if self._client is None:
            if not self._api_token:
                raise AuthenticationError(
                    "No Cloudflare API token provided. Set CLOUDFLARE_API_TOKEN or API_KEY."
                )
            if not self._account_id:
                raise AuthenticationError(
                    "No Cloudflare account ID provided. Set CLOUDFLARE_ACCOUNT_ID."
                )
            self._client = httpx.AsyncClient(
                headers={
                    "Authorization": f"Bearer {self._api_token}",
                    "Content-Type": "application/json",
                },
                timeout=120.0,
            )
        return self._client

    def _get_url(self, model: str) -> str:
        return f"{self.BASE_URL}/{self._account_id}/ai/run/{model}"

    @property
    def name(self) -> str:
        return "cloudflare"

    @property
    def default_model(self) -> str:
        return self._default_model

    @property
    def supports_tools(self) -> bool:
        return True

    async def _run(self, model: str, payload: dict) -> dict:
        """POST a payload to a model and return the `result` object."""
        client = self._get_client()
        try:
            response = await client.post(self._get_url(model), json=payload)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 429:
                raise RateLimitError(f"Cloudflare rate limit exceeded: {e}") from e
            if e.response.status_code in (401, 403):
                raise AuthenticationError(f"Cloudflare authentication failed: {e}") from e
            raise ProviderError(f"Cloudflare API error: {e}") from e
        except (httpx.HTTPError, ValueError) as e:
            raise ProviderError(f"Cloudflare API error: {e}") from e

        if not isinstance(data, dict):
            raise ProviderError(f"Cloudflare API error: unexpected response body {type(data).__name__}")

        if not data.get("success"):
            raise ProviderError(f"Cloudflare API error: {data.get('errors', [])}")

        result = data.get("result")
        if not isinstance(result, dict):
            raise ProviderError(f"Cloudflare API error: unexpected result {type(result).__name__}")
        return result

    @staticmethod
    def _messages(prompt: str, system: Optional[str]) -> list:
        messages = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})
        return messages

    @staticmethod
    def _usage(result: dict) -> dict:
        # Workers AI doesn't always return token counts
        usage = result.get("usage")
        if not isinstance(usage, dict):
            return {}
        return {
            "input_tokens": usage.get("prompt_tokens", 0),
            "output_tokens": usage.get("completion_tokens", 0),
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
        """Generate a response using Cloudflare Workers AI."""
        model = model or self._default_model
        result = await self._run(model, {
            "messages": self._messages(prompt, system),
            "max_tokens": max_tokens,
            "temperature": temperature,
        })

        content = result.get("response", "")
        if not isinstance(content, str):
            content = json.dumps(content)

        return ModelResponse(
            content=content,
            model=model,
            provider=self.name,
            usage=self._usage(result),
            raw_response=result,
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
        """Generate a schema-constrained response using JSON mode."""
        tool = select_tool(tools, tool_choice)
        model = model or self._default_model
        result = await self._run(model, {
            "messages": self._messages(prompt, system),
            "max_tokens": max_tokens,
            "temperature": temperature,
            "response_format": {"type": "json_schema", "json_schema": tool.parameters},
        })

        response = result.get("response", "")
        if isinstance(response, str):
            try:
                arguments = json.loads(response) if response else None
            except json.JSONDecodeError as e:
                raise ToolCallError(f"Cloudflare returned invalid JSON: {e}") from e
        else:
            arguments = response

        tool_calls = []
        if isinstance(arguments, dict):
            tool_calls.append(ToolCallResult(tool_name=tool.name, arguments=arguments, raw_response=result))

        return ModelResponse(
            content=response if isinstance(response, str) else json.dumps(response),
            model=model,
            provider=self.name,
            usage=self._usage(result),
            raw_response=result,
            tool_calls=tool_calls,
        )

    async def close(self):
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None
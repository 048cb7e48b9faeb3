"""
Google Gemini provider implementation

Uses the google-generativeai SDK. Structured output is native: the schema is
sent as `response_schema` with `response_mime_type="application/json"`.
"""

import os
import json
from typing import Optional, List

from .base import (
    ModelProvider, ModelResponse, ProviderError, AuthenticationError,
    ToolCallError, ToolDefinition, ToolCallResult, classify_error
)
from .tools import select_tool, to_gemini_schema


class GeminiProvider(ModelProvider):
    """
    Google Gemini provider.

    API key is read from:
    1. Constructor argument
    2. GEMINI_API_KEY environment variable
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        default_model: str = "gemini-2.5-flash",
    ):
        self._api_key = api_key or os.getenv("GEMINI_API_KEY")
        self._default_model = default_model
        self._client = None

    def _get_client(self):
        """Lazy configuration of the google-generativeai module."""
        if self._client is None:
            if not self._api_key:
                raise AuthenticationError(
                    "No Gemini API key provided. Set GEMINI_API_KEY or API_KEY."
                )
            try:
                import google.generativeai as genai
            except ImportError:
                raise ProviderError(
                    "google-generativeai package not installed. Run: pip install google-generativeai"
                )
            genai.configure(api_key=self._api_key)
            self._client = genai
        return self._client

    @property
    def name(self) -> str:
        return "gemini"

    @property
    def default_model(self) -> str:
        return self._default_model

    @property
    def supports_tools(self) -> bool:
        return True

    async def _generate_content(
        self,
        prompt: str,
        system: Optional[str],
        model: str,
        generation_config: dict,
    ):
        genai = self._get_client()
        try:
            gemini_model = genai.GenerativeModel(model, system_instruction=system)
            response = await gemini_model.generate_content_async(
                prompt,
                generation_config=generation_config,
            )
            # .text raises when the candidate was blocked or empty
            text = response.text
        except Exception as e:
            raise classify_error("Gemini", e) from e
        return response, text

    @staticmethod
    def _usage(response) -> dict:
        metadata = getattr(response, "usage_metadata", None)
        if metadata is None:
            return {}
        return {
            "input_tokens": getattr(metadata, "prompt_token_count", 0) or 0,
            "output_tokens": getattr(metadata, "candidates_token_count", 0) or 0,
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
        """Generate a JSON response using Gemini."""
        model = model or self._default_model
        response, text = await self._generate_content(prompt, system, model, {
            "max_output_tokens": max_tokens,
            "temperature": temperature,
            "response_mime_type": "application/json",
        })

        return ModelResponse(
            content=text or "",
            model=model,
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
        """Generate a response constrained by a Gemini response_schema."""
        tool = select_tool(tools, tool_choice)
        model = model or self._default_model
        response, text = await self._generate_content(prompt, system, model, {
            "max_output_tokens": max_tokens,
            "temperature": temperature,
            "response_mime_type": "application/json",
            "response_schema": to_gemini_schema(tool.parameters),
        })

        tool_calls = []
        if text:
            try:
                arguments = json.loads(text)
            except json.JSONDecodeError as e:
                raise ToolCallError(f"Gemini returned invalid JSON: {e}") from e
            if isinstance(arguments, dict):
                tool_calls.append(ToolCallResult(tool_name=tool.name, arguments=arguments, raw_response=response))

        return ModelResponse(
            content=text or "",
            model=model,
            provider=self.name,
            usage=self._usage(response),
            raw_response=response,
            tool_calls=tool_calls,
        )

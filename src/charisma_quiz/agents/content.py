"""
Content agent - quiz questions and performance analysis

The adapter between the quiz state machine and a generative model. Each
operation is exactly one provider round trip: schema-constrained when the
provider supports structured output, a JSON-only prompt otherwise. There is
no retry; any provider failure or unparseable answer is raised to the caller.
"""

import json
import logging
import re
from typing import Any, Optional

from ..providers.base import ModelProvider, ModelResponse, ToolDefinition, ProviderError
from ..quiz.schema import Question, QuizResult
from .prompts import (
    QUESTIONS_SYSTEM_PROMPT,
    QUESTIONS_TOOL,
    ANALYSIS_SYSTEM_PROMPT,
    ANALYSIS_TOOL,
    format_questions_prompt,
    format_analysis_prompt,
)

logger = logging.getLogger(__name__)


class ContentError(Exception):
    """Base exception for quiz content failures."""
    pass


class GenerationError(ContentError):
    """Question generation failed: unreachable provider, empty or malformed output."""
    pass


class AnalysisError(ContentError):
    """Performance analysis failed: unreachable provider, empty or malformed output."""
    pass


def extract_json(content: str) -> Any:
    """
    Pull a JSON document out of a model response.

    Models sometimes wrap JSON in prose or code fences, so the first
    object/array span is tried when the whole text is not valid JSON.

    Raises:
        ValueError: If the response is empty or holds no parseable JSON
    """
    text = (content or "").strip()
    if not text:
        raise ValueError("empty response")

    try:
        return json.loads(text)
    except json.JSONDecodeError:
        pass

    match = re.search(r'[\[{][\s\S]*[\]}]', text)
    if not match:
        raise ValueError("no JSON found in response")
    return json.loads(match.group())


def parse_questions(payload: Any) -> list[Question]:
    """
    Build questions from a decoded provider payload.

    Accepts {"questions": [...]} or a bare array.

    Raises:
        ValueError: On any structural problem, including zero questions
    """
    if isinstance(payload, dict):
        items = payload.get("questions")
    else:
        items = payload

    if not isinstance(items, list):
        raise ValueError("expected a list of questions")
    if not items:
        raise ValueError("provider returned no questions")

    return [Question.from_dict(item) for item in items]


def parse_analysis(payload: Any, score: int, total: int) -> QuizResult:
    """
    Build a result from a decoded provider payload.

    The provider's echoed score/totalQuestions are ignored in favour of the
    caller's values; feedback and archetype pass through verbatim.

    Raises:
        ValueError: When feedback or archetype is missing or blank
    """
    if not isinstance(payload, dict):
        raise ValueError("expected an analysis object")

    feedback = payload.get("feedback")
    archetype = payload.get("archetype")
    if not isinstance(feedback, str) or not feedback.strip():
        raise ValueError("analysis has no feedback")
    if not isinstance(archetype, str) or not archetype.strip():
        raise ValueError("analysis has no archetype")

    return QuizResult(
        score=score,
        total_questions=total,
        feedback=feedback,
        archetype=archetype,
    )


class QuizContentService:
    """
    Generates quiz content through a model provider.

    Stateless between calls apart from `last_usage`.
    """

    def __init__(
        self,
        provider: ModelProvider,
        model: Optional[str] = None,
        question_count: int = 5,
        max_tokens: int = 4096,
        temperature: float = 0.8,
    ):
        """
        Initialize the content service.

        Args:
            provider: Generative model provider
            model: Optional model override (uses provider default if not specified)
            question_count: Number of questions to request
            max_tokens: Output token cap per call
            temperature: Sampling temperature
        """
        self.provider = provider
        self.model = model
        self.question_count = question_count
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.last_usage: dict = {}

    async def generate_questions(self) -> list[Question]:
        """
        Request a fresh question set.

        Raises:
            GenerationError: Provider failure, empty response, malformed
                output, or zero questions
        """
        structured = self.provider.supports_tools
        prompt = format_questions_prompt(self.question_count, structured)

        try:
            response = await self._request(prompt, QUESTIONS_SYSTEM_PROMPT, QUESTIONS_TOOL, structured)
        except ProviderError as e:
            raise GenerationError(f"Question generation failed: {e}") from e

        try:
            questions = parse_questions(self._payload(response, QUESTIONS_TOOL))
        except ValueError as e:
            raise GenerationError(f"Malformed questions from {self.provider.name}: {e}") from e

        if len(questions) != self.question_count:
            logger.info("Requested %d questions, provider returned %d", self.question_count, len(questions))

        logger.debug("Generated %d questions with %s", len(questions), self.provider.name)
        return questions

    async def analyze_performance(self, score: int, total: int) -> QuizResult:
        """
        Request feedback and an archetype for a finished quiz.

        Args:
            score: Correct answers (authoritative)
            total: Questions answered (authoritative)

        Raises:
            AnalysisError: Provider failure, empty response or malformed output
        """
        structured = self.provider.supports_tools
        prompt = format_analysis_prompt(score, total, structured)

        try:
            response = await self._request(prompt, ANALYSIS_SYSTEM_PROMPT, ANALYSIS_TOOL, structured)
        except ProviderError as e:
            raise AnalysisError(f"Performance analysis failed: {e}") from e

        try:
            return parse_analysis(self._payload(response, ANALYSIS_TOOL), score, total)
        except ValueError as e:
            raise AnalysisError(f"Malformed analysis from {self.provider.name}: {e}") from e

    async def _request(
        self,
        prompt: str,
        system: str,
        tool: ToolDefinition,
        structured: bool,
    ) -> ModelResponse:
        """One provider round trip."""
        if structured:
            response = await self.provider.generate_with_tools(
                prompt=prompt,
                tools=[tool],
                system=system,
                model=self.model,
                max_tokens=self.max_tokens,
                temperature=self.temperature,
                tool_choice=tool.name,
            )
        else:
            response = await self.provider.generate(
                prompt=prompt,
                system=system,
                model=self.model,
                max_tokens=self.max_tokens,
                temperature=self.temperature,
            )

        self.last_usage = {
            "input_tokens": response.input_tokens,
            "output_tokens": response.output_tokens,
        }
        return response

    def _payload(self, response: ModelResponse, tool: ToolDefinition) -> Any:
        """Structured arguments if the model filled the schema, else parsed text."""
        for call in response.tool_calls:
            if call.tool_name == tool.name:
                return call.arguments

        if response.has_tool_call:
            logger.debug("Model filled an unexpected schema, parsing content instead")
        elif self.provider.supports_tools:
            logger.debug("Model didn't fill the schema, parsing content instead")

        return extract_json(response.content)

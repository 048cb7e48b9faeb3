"""
Mock provider for testing

Returns well-formed quiz content without making API calls.
"""

import asyncio
import json
import random
import re
from typing import Optional, List, Callable, Any, Dict, Union
from dataclasses import dataclass, field

from .base import ModelProvider, ModelResponse, ProviderError, ToolDefinition, ToolCallResult


MOCK_SCENARIOS = [
    (
        "Ela cruza os braços e olha para o celular enquanto você conta uma história. O que fazer?",
        [
            "Continuar a história com mais detalhes para prender a atenção",
            "Encerrar a história com leveza e fazer uma pergunta sobre ela",
            "Perguntar se ela está entediada",
            "Pegar o seu celular também",
        ],
        1,
        "Braços cruzados e olhar desviado sinalizam desconexão; devolver o foco para ela reabre a conversa.",
    ),
    (
        "Você quer puxar assunto com alguém na fila do café. Qual abertura funciona melhor?",
        [
            "\"Oi, tudo bem?\"",
            "Um comentário bem-humorado sobre algo que os dois estão vendo",
            "Um elogio à aparência da pessoa",
            "Perguntar o nome dela direto",
        ],
        1,
        "Observações compartilhadas criam cumplicidade sem pressão e convidam a uma resposta espontânea.",
    ),
    (
        "Ela conta que teve um dia péssimo no trabalho. Qual resposta gera mais conexão?",
        [
            "Dar três conselhos práticos para resolver o problema",
            "Contar um dia ainda pior que você teve",
            "\"Nossa, deve ter sido exaustivo. O que mais pesou?\"",
            "Mudar de assunto para animá-la",
        ],
        2,
        "Validar a emoção antes de resolver faz a pessoa se sentir ouvida, e isso gera vínculo.",
    ),
    (
        "A conversa está fluindo bem e vocês estão rindo. Como criar tensão positiva?",
        [
            "Sustentar o olhar por um instante a mais e baixar o tom de voz",
            "Dizer imediatamente que está gostando dela",
            "Contar mais piadas para manter o ritmo",
            "Sugerir ir embora para parecer ocupado",
        ],
        0,
        "Pequenas pausas e contato visual prolongado contrastam com o riso e criam expectativa.",
    ),
    (
        "Ela responde suas mensagens com monossílabos. O que fazer?",
        [
            "Mandar mensagens mais longas",
            "Perguntar por que ela está seca",
            "Diminuir o ritmo e enviar algo leve e específico que a convide a contar uma história",
            "Parar de responder para sempre",
        ],
        2,
        "Perguntas abertas e específicas baixam o esforço de resposta e reacendem o interesse.",
    ),
]

MOCK_ARCHETYPES = [
    (0.8, "Mestre do Carisma"),
    (0.5, "Sedutor em Ascensão"),
    (0.0, "Aprendiz Atento"),
]


def generate_mock_questions(count: int = 5) -> List[Dict[str, Any]]:
    """
    Build `count` quiz questions in the wire (camelCase) shape.

    Args:
        count: Number of questions to produce

    Returns:
        List of question dicts
    """
    questions = []
    for i in range(count):
        scenario, options, correct, explanation = MOCK_SCENARIOS[i % len(MOCK_SCENARIOS)]
        questions.append({
            "id": i + 1,
            "scenario": scenario,
            "options": list(options),
            "correctOptionIndex": correct,
            "explanation": explanation,
        })
    return questions


def generate_mock_analysis(score: int, total: int) -> Dict[str, Any]:
    """Build an analysis payload for a score."""
    ratio = score / total if total else 0.0
    archetype = next(label for threshold, label in MOCK_ARCHETYPES if ratio >= threshold)
    return {
        "score": score,
        "totalQuestions": total,
        "feedback": (
            f"Você acertou {score} de {total}. Sua leitura social já tem boas bases.\n\n"
            "Continue praticando a escuta ativa e a tensão positiva nas próximas conversas."
        ),
        "archetype": archetype,
    }


def _default_arguments(prompt: str, tool: ToolDefinition) -> Dict[str, Any]:
    if "questions" in tool.parameters.get("properties", {}):
        return {"questions": generate_mock_questions(_question_count(prompt))}
    score, total = _score_from_prompt(prompt)
    return generate_mock_analysis(score, total)


def _question_count(prompt: str) -> int:
    match = re.search(r"(\d+) perguntas", prompt)
    return int(match.group(1)) if match else 5


def _score_from_prompt(prompt: str) -> tuple[int, int]:
    match = re.search(r"Acertou (\d+) de (\d+)", prompt)
    if match:
        return int(match.group(1)), int(match.group(2))
    return 0, 5


@dataclass
class MockProvider(ModelProvider):
    """
    Mock provider for testing.

    Can be configured with fixed text, fixed structured arguments, generators,
    or simulated failures. Every prompt it receives is recorded in `calls`.
    """

    _name: str = "mock"
    _default_model: str = "mock-model-v1"
    fixed_response: Optional[str] = None
    response_generator: Optional[Callable[[str], str]] = None
    tool_arguments: Optional[Union[Dict[str, Any], Callable[[str, ToolDefinition], Optional[Dict[str, Any]]]]] = None
    structured: bool = True
    delay_seconds: float = 0.0
    fail_rate: float = 0.0  # Probability of raising an error
    error: Optional[Exception] = None
    token_count: int = 100
    calls: List[str] = field(default_factory=list)

    @property
    def name(self) -> str:
        return self._name

    @property
    def default_model(self) -> str:
        return self._default_model

    @property
    def supports_tools(self) -> bool:
        return self.structured

    async def _simulate(self, prompt: str):
        self.calls.append(prompt)

        if self.delay_seconds > 0:
            await asyncio.sleep(self.delay_seconds)

        if self.error is not None:
            raise self.error

        if self.fail_rate > 0 and random.random() < self.fail_rate:
            raise ProviderError("Simulated mock provider failure")

    def _usage(self, prompt: str) -> dict:
        return {
            "input_tokens": len(prompt.split()) * 2,
            "output_tokens": self.token_count,
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
        """Generate a mock text response."""
        await self._simulate(prompt)

        if self.fixed_response is not None:
            content = self.fixed_response
        elif self.response_generator is not None:
            content = self.response_generator(prompt)
        else:
            content = self._default_response(prompt)

        return ModelResponse(
            content=content,
            model=model or self._default_model,
            provider=self.name,
            usage=self._usage(prompt),
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
        """Generate mock structured output for the forced schema."""
        if not self.structured:
            return await super().generate_with_tools(prompt, tools, tool_choice=tool_choice)

        await self._simulate(prompt)

        tool = next((t for t in tools if t.name == tool_choice), tools[0])

        if callable(self.tool_arguments):
            arguments = self.tool_arguments(prompt, tool)
        elif self.tool_arguments is not None:
            arguments = self.tool_arguments
        else:
            arguments = _default_arguments(prompt, tool)

        tool_calls = []
        if arguments is not None:
            tool_calls.append(ToolCallResult(tool_name=tool.name, arguments=arguments))

        return ModelResponse(
            content=self.fixed_response or "",
            model=model or self._default_model,
            provider=self.name,
            usage=self._usage(prompt),
            tool_calls=tool_calls,
        )

    def _default_response(self, prompt: str) -> str:
        """
        Generate a contextual JSON response based on prompt content.

        Analysis prompts mention the score ("Acertou X de Y"); anything else
        is treated as a question request.
        """
        if re.search(r"Acertou \d+ de \d+", prompt):
            score, total = _score_from_prompt(prompt)
            return json.dumps(generate_mock_analysis(score, total), ensure_ascii=False, indent=2)

        return json.dumps(
            {"questions": generate_mock_questions(_question_count(prompt))},
            ensure_ascii=False,
            indent=2,
        )


def create_failing_mock(error: Optional[Exception] = None) -> MockProvider:
    """Create a mock provider whose every call fails."""
    return MockProvider(error=error or ProviderError("Simulated mock provider failure"))

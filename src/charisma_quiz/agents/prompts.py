"""
Prompt templates and output schemas for the quiz content agents

All prompt engineering lives here. The quiz ships in Portuguese (pt-BR):
1. Scenario-based questions on social psychology and conversation dynamics
2. A short mentor-style analysis with a personality archetype
"""

from ..providers.base import ToolDefinition

# =============================================================================
# QUESTION GENERATION
# =============================================================================

QUESTIONS_SYSTEM_PROMPT = """Você é um especialista em psicologia social, carisma e dinâmica de conversas.
Você cria quizzes desafiadores e práticos, nunca genéricos."""

QUESTIONS_PROMPT = """Crie um quiz de {count} perguntas desafiadoras em Português (Brasil).

O tema é: "Transformar conversas chatas em encontros sem esforço usando psicologia aplicada".

Cada pergunta deve apresentar um **cenário prático** de interação social ou encontro, e pedir a melhor resposta baseada em inteligência social e atração.
Evite clichês baratos. Foque em:
1. Leitura de linguagem corporal.
2. Quebra de gelo criativa.
3. Escuta ativa e validação emocional.
4. Criar tensão positiva.

Cada pergunta tem exatamente 4 opções e uma única melhor resposta.
{format_instructions}"""

QUESTIONS_JSON_INSTRUCTIONS = """Retorne APENAS JSON válido neste formato:
{"questions": [{"id": 1, "scenario": "...", "options": ["...", "...", "...", "..."], "correctOptionIndex": 0, "explanation": "..."}]}"""

QUESTIONS_TOOL_INSTRUCTIONS = "Entregue o quiz chamando a ferramenta submit_quiz_questions."

QUESTIONS_TOOL = ToolDefinition(
    name="submit_quiz_questions",
    description="Submit the generated quiz. Call this tool with every question.",
    parameters={
        "type": "object",
        "properties": {
            "questions": {
                "type": "array",
                "items": {
                    "type": "object",
                    "properties": {
                        "id": {"type": "integer"},
                        "scenario": {
                            "type": "string",
                            "description": "A situação social ou pergunta"
                        },
                        "options": {
                            "type": "array",
                            "items": {"type": "string"},
                            "description": "4 opções de resposta"
                        },
                        "correctOptionIndex": {
                            "type": "integer",
                            "description": "Índice (0-3) da melhor resposta"
                        },
                        "explanation": {
                            "type": "string",
                            "description": "Por que essa é a melhor resposta psicologicamente"
                        }
                    },
                    "required": ["id", "scenario", "options", "correctOptionIndex", "explanation"]
                }
            }
        },
        "required": ["questions"]
    }
)

# =============================================================================
# PERFORMANCE ANALYSIS
# =============================================================================

ANALYSIS_SYSTEM_PROMPT = """Você é um mentor sofisticado de carisma e sedução inteligente.
Seu feedback é direto, elegante e motivador."""

ANALYSIS_PROMPT = """O usuário completou um quiz sobre "Sedução e Conversa Inteligente".
Acertou {score} de {total} ({percentage}%).

Gere um feedback curto e um arquétipo de personalidade.
Use o tom de um mentor sofisticado.
{format_instructions}"""

ANALYSIS_JSON_INSTRUCTIONS = """Retorne APENAS JSON válido neste formato:
{"score": 0, "totalQuestions": 0, "feedback": "...", "archetype": "..."}"""

ANALYSIS_TOOL_INSTRUCTIONS = "Entregue a análise chamando a ferramenta submit_performance_analysis."

ANALYSIS_TOOL = ToolDefinition(
    name="submit_performance_analysis",
    description="Submit the analysis of the user's quiz performance.",
    parameters={
        "type": "object",
        "properties": {
            "score": {"type": "integer"},
            "totalQuestions": {"type": "integer"},
            "feedback": {
                "type": "string",
                "description": "2 parágrafos de análise"
            },
            "archetype": {
                "type": "string",
                "description": "Um título legal, ex: 'Mestre do Carisma' ou 'Aprendiz Atento'"
            }
        },
        "required": ["score", "totalQuestions", "feedback", "archetype"]
    }
)


def format_questions_prompt(count: int, structured: bool) -> str:
    """Format the question generation prompt."""
    return QUESTIONS_PROMPT.format(
        count=count,
        format_instructions=QUESTIONS_TOOL_INSTRUCTIONS if structured else QUESTIONS_JSON_INSTRUCTIONS,
    )


def format_analysis_prompt(score: int, total: int, structured: bool) -> str:
    """Format the performance analysis prompt."""
    percentage = score / total * 100 if total else 0
    return ANALYSIS_PROMPT.format(
        score=score,
        total=total,
        percentage=f"{percentage:g}",
        format_instructions=ANALYSIS_TOOL_INSTRUCTIONS if structured else ANALYSIS_JSON_INSTRUCTIONS,
    )

"""
Quiz schema and data structures

Questions and results as the provider produces them, plus the session state
the quiz state machine owns.
"""

import json
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class AppState(str, Enum):
    """Screens a quiz session moves through."""
    WELCOME = "WELCOME"
    LOADING = "LOADING"
    QUIZ = "QUIZ"
    ANALYZING = "ANALYZING"
    RESULTS = "RESULTS"
    ERROR = "ERROR"


def _require(data: dict, key: str, kind: type) -> Any:
    """Fetch a field from provider JSON, rejecting missing or mistyped values."""
    if key not in data:
        raise ValueError(f"missing field '{key}'")
    value = data[key]
    # bool is an int subclass; a JSON true is never a valid index
    if isinstance(value, bool) or not isinstance(value, kind):
        raise ValueError(f"field '{key}' must be {kind.__name__}, got {type(value).__name__}")
    return value


@dataclass(frozen=True)
class Question:
    """A single scenario-based multiple-choice question."""
    id: int
    scenario: str
    options: tuple[str, ...]
    correct_option_index: int
    explanation: str

    def __post_init__(self):
        if not self.options:
            raise ValueError(f"question {self.id} has no options")
        if not 0 <= self.correct_option_index < len(self.options):
            raise ValueError(
                f"question {self.id}: correct option {self.correct_option_index} "
                f"is outside 0..{len(self.options) - 1}"
            )

    @property
    def correct_option(self) -> str:
        return self.options[self.correct_option_index]

    def is_correct(self, index: int) -> bool:
        return index == self.correct_option_index

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "scenario": self.scenario,
            "options": list(self.options),
            "correctOptionIndex": self.correct_option_index,
            "explanation": self.explanation,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Question":
        """
        Build from provider JSON (camelCase keys).

        Raises:
            ValueError: On a missing or mistyped field, or an out-of-range
                correct option index.
        """
        if not isinstance(data, dict):
            raise ValueError(f"question must be an object, got {type(data).__name__}")

        options = _require(data, "options", list)
        if not all(isinstance(o, str) for o in options):
            raise ValueError("every option must be a string")

        return cls(
            id=_require(data, "id", int),
            scenario=_require(data, "scenario", str),
            options=tuple(options),
            correct_option_index=_require(data, "correctOptionIndex", int),
            explanation=_require(data, "explanation", str),
        )


@dataclass(frozen=True)
class QuizResult:
    """Final score plus the provider's (or fallback) analysis."""
    score: int
    total_questions: int
    feedback: str
    archetype: str

    def __post_init__(self):
        if self.total_questions <= 0:
            raise ValueError("total_questions must be positive")
        if not 0 <= self.score <= self.total_questions:
            raise ValueError(f"score {self.score} is outside 0..{self.total_questions}")

    @property
    def percentage(self) -> int:
        """Score as a whole percentage, halves rounded up."""
        return math.floor(self.score / self.total_questions * 100 + 0.5)

    def to_dict(self) -> dict:
        return {
            "score": self.score,
            "totalQuestions": self.total_questions,
            "feedback": self.feedback,
            "archetype": self.archetype,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False, indent=2)


@dataclass(frozen=True)
class SessionState:
    """
    In-memory state of one quiz attempt.

    Never mutated in place: transitions return a new SessionState.
    """
    app_state: AppState = AppState.WELCOME
    questions: tuple[Question, ...] = ()
    current_question_index: int = 0
    score: int = 0
    result: Optional[QuizResult] = None
    selected_option: Optional[int] = None
    explanation_visible: bool = False
    error: Optional[str] = None

    @property
    def total_questions(self) -> int:
        return len(self.questions)

    @property
    def current_question(self) -> Optional[Question]:
        if 0 <= self.current_question_index < len(self.questions):
            return self.questions[self.current_question_index]
        return None

    @property
    def is_last_question(self) -> bool:
        return self.current_question_index == len(self.questions) - 1

    @property
    def progress(self) -> float:
        """Fraction of the quiz reached, counting the current question."""
        if not self.questions:
            return 0.0
        return (self.current_question_index + 1) / len(self.questions)

    @property
    def awaiting_provider(self) -> bool:
        """Whether a provider call is outstanding in this state."""
        return self.app_state in (AppState.LOADING, AppState.ANALYZING)

    def to_dict(self) -> dict:
        return {
            "app_state": self.app_state.value,
            "questions": [q.to_dict() for q in self.questions],
            "current_question_index": self.current_question_index,
            "score": self.score,
            "result": self.result.to_dict() if self.result else None,
            "selected_option": self.selected_option,
            "explanation_visible": self.explanation_visible,
            "error": self.error,
        }

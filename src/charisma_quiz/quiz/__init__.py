"""
Quiz data model and session state machine for charisma-quiz

The machine lives in `quiz.machine`; import it from there (it depends on the
content agents, which depend on this package's schema).
"""

from .schema import (
    AppState,
    Question,
    QuizResult,
    SessionState,
)

__all__ = [
    "AppState",
    "Question",
    "QuizResult",
    "SessionState",
]

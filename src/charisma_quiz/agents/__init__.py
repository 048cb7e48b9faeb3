"""
Content agents for charisma-quiz

The content agent turns provider answers into quiz questions and results.
"""

from .content import (
    QuizContentService,
    ContentError,
    GenerationError,
    AnalysisError,
)

__all__ = [
    "QuizContentService",
    "ContentError",
    "GenerationError",
    "AnalysisError",
]

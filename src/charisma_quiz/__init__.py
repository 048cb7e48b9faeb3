"""
charisma-quiz: AI-generated attraction psychology quiz with a sales funnel.

Scenario questions and a mentor-style diagnosis come from a generative model;
the result screen leads into the e-book offer.
"""

__version__ = "0.1.0"

from .config import config
from .quiz.schema import AppState, Question, QuizResult, SessionState
from .agents.content import QuizContentService, GenerationError, AnalysisError
from .quiz.machine import QuizMachine, transition, fallback_result
from .share import ShareService, ShareOutcome, open_sales_page

__all__ = [
    # Config
    "config",
    # Quiz data
    "AppState",
    "Question",
    "QuizResult",
    "SessionState",
    # Content
    "QuizContentService",
    "GenerationError",
    "AnalysisError",
    # State machine
    "QuizMachine",
    "transition",
    "fallback_result",
    # Funnel
    "ShareService",
    "ShareOutcome",
    "open_sales_page",
]

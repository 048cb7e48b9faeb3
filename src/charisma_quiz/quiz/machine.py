"""
Quiz state machine

WELCOME -> LOADING -> QUIZ -> ANALYZING -> RESULTS, with ERROR reachable from
LOADING. `transition()` is a pure function over SessionState; `QuizMachine`
owns the one live session, dispatches events into it and performs the
provider calls the LOADING and ANALYZING states wait on.

Question generation failing is fatal to the session (ERROR, retry through
restart). Analysis failing is not: a fallback result is shown instead.
"""

import logging
from dataclasses import dataclass, replace
from typing import Callable, Optional, Union

from ..agents.content import GenerationError, AnalysisError
from .schema import AppState, Question, QuizResult, SessionState

logger = logging.getLogger(__name__)


FALLBACK_FEEDBACK = "Análise indisponível no momento, mas parabéns por completar o quiz!"
FALLBACK_ARCHETYPE = "Participante"


# =============================================================================
# EVENTS
# =============================================================================

@dataclass(frozen=True)
class StartQuiz:
    pass


@dataclass(frozen=True)
class QuestionsLoaded:
    questions: tuple[Question, ...]


@dataclass(frozen=True)
class QuestionsFailed:
    message: str


@dataclass(frozen=True)
class SelectOption:
    index: int


@dataclass(frozen=True)
class Advance:
    pass


@dataclass(frozen=True)
class AnalysisCompleted:
    result: QuizResult


@dataclass(frozen=True)
class AnalysisFailed:
    message: str


@dataclass(frozen=True)
class Restart:
    pass


Event = Union[
    StartQuiz, QuestionsLoaded, QuestionsFailed, SelectOption,
    Advance, AnalysisCompleted, AnalysisFailed, Restart,
]


def fallback_result(score: int, total: int) -> QuizResult:
    """The result shown when performance analysis is unavailable."""
    return QuizResult(
        score=score,
        total_questions=total,
        feedback=FALLBACK_FEEDBACK,
        archetype=FALLBACK_ARCHETYPE,
    )


# =============================================================================
# TRANSITIONS
# =============================================================================

def transition(state: SessionState, event: Event) -> SessionState:
    """
    Apply an event to a session.

    Returns a new SessionState, or `state` itself when the event is not
    valid in the current state.
    """
    current = state.app_state

    if isinstance(event, Restart):
        return SessionState()

    if isinstance(event, StartQuiz):
        if current != AppState.WELCOME:
            return state
        return replace(state, app_state=AppState.LOADING, error=None)

    if isinstance(event, QuestionsLoaded):
        if current != AppState.LOADING:
            return state
        if not event.questions:
            return replace(state, app_state=AppState.ERROR, error="O provedor não retornou perguntas.")
        return replace(
            state,
            app_state=AppState.QUIZ,
            questions=tuple(event.questions),
            current_question_index=0,
            score=0,
            selected_option=None,
            explanation_visible=False,
        )

    if isinstance(event, QuestionsFailed):
        if current != AppState.LOADING:
            return state
        return replace(state, app_state=AppState.ERROR, error=event.message)

    if isinstance(event, SelectOption):
        question = state.current_question
        if current != AppState.QUIZ or state.explanation_visible or question is None:
            return state
        if not 0 <= event.index < len(question.options):
            return state
        return replace(
            state,
            selected_option=event.index,
            explanation_visible=True,
            score=state.score + (1 if question.is_correct(event.index) else 0),
        )

    if isinstance(event, Advance):
        if current != AppState.QUIZ or not state.explanation_visible:
            return state
        if state.is_last_question:
            return replace(
                state,
                app_state=AppState.ANALYZING,
                selected_option=None,
                explanation_visible=False,
            )
        return replace(
            state,
            current_question_index=state.current_question_index + 1,
            selected_option=None,
            explanation_visible=False,
        )

    if isinstance(event, AnalysisCompleted):
        if current != AppState.ANALYZING:
            return state
        return replace(state, app_state=AppState.RESULTS, result=event.result)

    if isinstance(event, AnalysisFailed):
        if current != AppState.ANALYZING:
            return state
        return replace(
            state,
            app_state=AppState.RESULTS,
            result=fallback_result(state.score, state.total_questions),
        )

    return state


# =============================================================================
# MACHINE
# =============================================================================

class QuizMachine:
    """
    Drives one quiz session.

    At most one provider call is outstanding at a time. Calls cannot be
    cancelled; a restart while one is pending discards its answer.
    """

    def __init__(
        self,
        content,
        on_change: Optional[Callable[[SessionState], None]] = None,
    ):
        """
        Initialize the machine.

        Args:
            content: Content adapter exposing generate_questions() and
                analyze_performance(score, total)
            on_change: Called with the new state after every accepted transition
        """
        self.content = content
        self.on_change = on_change
        self.state = SessionState()
        self._pending = False
        self._epoch = 0

    @property
    def busy(self) -> bool:
        """Whether a provider call is in flight."""
        return self._pending

    def dispatch(self, event: Event) -> bool:
        """Apply an event; returns False when it was rejected."""
        new_state = transition(self.state, event)
        if new_state is self.state:
            logger.debug("Rejected %s in %s", type(event).__name__, self.state.app_state.value)
            return False

        logger.debug(
            "%s: %s -> %s",
            type(event).__name__,
            self.state.app_state.value,
            new_state.app_state.value,
        )
        self.state = new_state
        if self.on_change is not None:
            self.on_change(new_state)
        return True

    async def start(self) -> SessionState:
        """Leave WELCOME and load a fresh question set."""
        if self._pending or not self.dispatch(StartQuiz()):
            return self.state

        epoch = self._epoch
        self._pending = True
        try:
            questions = await self.content.generate_questions()
        except GenerationError as e:
            logger.warning("Question generation failed: %s", e)
            event = QuestionsFailed(str(e))
        else:
            event = QuestionsLoaded(tuple(questions))
        finally:
            self._pending = False

        if epoch != self._epoch:
            logger.debug("Discarding questions from a restarted session")
            return self.state

        self.dispatch(event)
        return self.state

    def select_option(self, index: int) -> bool:
        """Answer the current question; one shot per question."""
        return self.dispatch(SelectOption(index))

    async def advance(self) -> SessionState:
        """Move past the answered question, analysing after the last one."""
        if self._pending or not self.dispatch(Advance()):
            return self.state

        if self.state.app_state != AppState.ANALYZING:
            return self.state

        epoch = self._epoch
        score, total = self.state.score, self.state.total_questions
        self._pending = True
        try:
            result = await self.content.analyze_performance(score, total)
        except AnalysisError as e:
            logger.warning("Performance analysis failed, using fallback result: %s", e)
            event = AnalysisFailed(str(e))
        else:
            event = AnalysisCompleted(result)
        finally:
            self._pending = False

        if epoch != self._epoch:
            logger.debug("Discarding analysis from a restarted session")
            return self.state

        self.dispatch(event)
        return self.state

    def restart(self) -> SessionState:
        """Clear the session and return to WELCOME."""
        self._epoch += 1
        self.dispatch(Restart())
        return self.state

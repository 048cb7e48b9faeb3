"""
Tests for the quiz state machine.
"""

import pytest
import asyncio
from typing import Optional

from charisma_quiz.agents.content import GenerationError, AnalysisError
from charisma_quiz.quiz.machine import (
    QuizMachine,
    transition,
    fallback_result,
    StartQuiz,
    QuestionsLoaded,
    QuestionsFailed,
    SelectOption,
    Advance,
    AnalysisCompleted,
    AnalysisFailed,
    Restart,
    FALLBACK_FEEDBACK,
    FALLBACK_ARCHETYPE,
)
from charisma_quiz.quiz.schema import AppState, Question, QuizResult, SessionState


def make_questions(count: int = 5) -> list:
    return [
        Question(
            id=i + 1,
            scenario=f"Cenário {i + 1}",
            options=("a", "b", "c", "d"),
            correct_option_index=i % 4,
            explanation=f"Explicação {i + 1}",
        )
        for i in range(count)
    ]


class FakeContent:
    """Content adapter double with scripted answers."""

    def __init__(
        self,
        questions: Optional[list] = None,
        generation_error: Optional[Exception] = None,
        analysis: Optional[QuizResult] = None,
        analysis_error: Optional[Exception] = None,
    ):
        self.questions = make_questions() if questions is None else questions
        self.generation_error = generation_error
        self.analysis = analysis
        self.analysis_error = analysis_error
        self.gate: Optional[asyncio.Event] = None
        self.generate_calls = 0
        self.analyze_calls = []

    async def generate_questions(self):
        self.generate_calls += 1
        if self.gate is not None:
            await self.gate.wait()
        if self.generation_error is not None:
            raise self.generation_error
        return self.questions

    async def analyze_performance(self, score: int, total: int):
        self.analyze_calls.append((score, total))
        if self.gate is not None:
            await self.gate.wait()
        if self.analysis_error is not None:
            raise self.analysis_error
        if self.analysis is not None:
            return self.analysis
        return QuizResult(score=score, total_questions=total, feedback="Muito bem.", archetype="Mestre do Carisma")


def quiz_state(count: int = 5) -> SessionState:
    return transition(
        transition(SessionState(), StartQuiz()),
        QuestionsLoaded(tuple(make_questions(count))),
    )


async def answer_all(machine: QuizMachine, picks: list):
    for pick in picks:
        assert machine.select_option(pick)
        await machine.advance()


class TestTransition:
    """Tests for the pure transition function."""

    def test_start(self):
        """Test WELCOME -> LOADING."""
        state = transition(SessionState(), StartQuiz())
        assert state.app_state == AppState.LOADING

    def test_start_outside_welcome_is_ignored(self):
        """Test start is only valid from WELCOME."""
        state = quiz_state()
        assert transition(state, StartQuiz()) is state

    def test_questions_loaded(self):
        """Test LOADING -> QUIZ resets progress."""
        state = quiz_state()

        assert state.app_state == AppState.QUIZ
        assert state.total_questions == 5
        assert state.current_question_index == 0
        assert state.score == 0
        assert state.selected_option is None
        assert not state.explanation_visible

    def test_zero_questions_is_an_error(self):
        """Test an empty question set cannot start a quiz."""
        loading = transition(SessionState(), StartQuiz())
        state = transition(loading, QuestionsLoaded(()))

        assert state.app_state == AppState.ERROR
        assert state.error

    def test_questions_failed(self):
        """Test LOADING -> ERROR."""
        loading = transition(SessionState(), StartQuiz())
        state = transition(loading, QuestionsFailed("boom"))

        assert state.app_state == AppState.ERROR
        assert state.error == "boom"

    def test_select_correct_option(self):
        """Test a correct answer scores and reveals the explanation."""
        state = transition(quiz_state(), SelectOption(0))

        assert state.score == 1
        assert state.selected_option == 0
        assert state.explanation_visible

    def test_select_wrong_option(self):
        """Test a wrong answer reveals without scoring."""
        state = transition(quiz_state(), SelectOption(3))

        assert state.score == 0
        assert state.selected_option == 3
        assert state.explanation_visible

    def test_select_is_one_shot(self):
        """Test a second selection on the same question is ignored."""
        answered = transition(quiz_state(), SelectOption(0))
        assert transition(answered, SelectOption(1)) is answered

    def test_select_out_of_range(self):
        """Test selecting a missing option is ignored."""
        state = quiz_state()
        assert transition(state, SelectOption(4)) is state
        assert transition(state, SelectOption(-1)) is state

    def test_advance_requires_answer(self):
        """Test advance before answering is ignored."""
        state = quiz_state()
        assert transition(state, Advance()) is state

    def test_advance(self):
        """Test advance moves to the next question."""
        state = transition(transition(quiz_state(), SelectOption(0)), Advance())

        assert state.app_state == AppState.QUIZ
        assert state.current_question_index == 1
        assert state.selected_option is None
        assert not state.explanation_visible
        assert state.score == 1

    def test_advance_after_last_question(self):
        """Test the last advance starts the analysis."""
        state = transition(transition(quiz_state(1), SelectOption(0)), Advance())
        assert state.app_state == AppState.ANALYZING

    def test_analysis_completed(self):
        """Test ANALYZING -> RESULTS with the provider result."""
        analyzing = transition(transition(quiz_state(1), SelectOption(0)), Advance())
        result = QuizResult(score=1, total_questions=1, feedback="f", archetype="a")
        state = transition(analyzing, AnalysisCompleted(result))

        assert state.app_state == AppState.RESULTS
        assert state.result is result

    def test_analysis_failed_uses_fallback(self):
        """Test a failed analysis still reaches RESULTS."""
        analyzing = transition(transition(quiz_state(1), SelectOption(0)), Advance())
        state = transition(analyzing, AnalysisFailed("boom"))

        assert state.app_state == AppState.RESULTS
        assert state.result == fallback_result(1, 1)

    def test_restart_from_anywhere(self):
        """Test restart always returns a fresh session."""
        for state in (
            SessionState(),
            transition(SessionState(), StartQuiz()),
            transition(quiz_state(), SelectOption(1)),
            SessionState(app_state=AppState.ERROR, error="x"),
        ):
            assert transition(state, Restart()) == SessionState()

    def test_events_in_wrong_state(self):
        """Test results arriving in the wrong state are ignored."""
        state = SessionState()
        result = QuizResult(score=0, total_questions=1, feedback="f", archetype="a")

        assert transition(state, QuestionsLoaded(tuple(make_questions()))) is state
        assert transition(state, QuestionsFailed("x")) is state
        assert transition(state, AnalysisCompleted(result)) is state
        assert transition(state, AnalysisFailed("x")) is state
        assert transition(state, SelectOption(0)) is state


class TestFallbackResult:
    """Tests for the fallback result."""

    def test_fallback_keeps_score(self):
        """Test fallback carries the real score."""
        result = fallback_result(3, 5)

        assert result.score == 3
        assert result.total_questions == 5
        assert result.feedback == FALLBACK_FEEDBACK
        assert result.archetype == FALLBACK_ARCHETYPE
        assert result.percentage == 60


class TestQuizMachine:
    """Tests for QuizMachine."""

    @pytest.mark.asyncio
    async def test_full_session(self):
        """Test a session from welcome to results."""
        content = FakeContent()
        machine = QuizMachine(content)

        await machine.start()
        assert machine.state.app_state == AppState.QUIZ

        # Correct answers are 0, 1, 2, 3, 0; get three right
        await answer_all(machine, [0, 1, 2, 0, 1])

        assert machine.state.app_state == AppState.RESULTS
        assert machine.state.result.score == 3
        assert machine.state.result.percentage == 60
        assert content.analyze_calls == [(3, 5)]

    @pytest.mark.asyncio
    async def test_score_counts_correct_answers(self):
        """Test final score equals the number of correct selections."""
        machine = QuizMachine(FakeContent())
        await machine.start()
        await answer_all(machine, [0, 1, 2, 3, 0])

        assert machine.state.result.score == 5

    @pytest.mark.asyncio
    async def test_second_selection_rejected(self):
        """Test only the first selection per question counts."""
        machine = QuizMachine(FakeContent())
        await machine.start()

        assert machine.select_option(0)
        assert not machine.select_option(1)
        assert machine.state.selected_option == 0
        assert machine.state.score == 1

    @pytest.mark.asyncio
    async def test_advance_before_answer_rejected(self):
        """Test advance without an answer leaves the session alone."""
        machine = QuizMachine(FakeContent())
        await machine.start()
        before = machine.state

        await machine.advance()

        assert machine.state is before

    @pytest.mark.asyncio
    async def test_generation_failure(self):
        """Test a failed question request ends in ERROR."""
        machine = QuizMachine(FakeContent(generation_error=GenerationError("offline")))
        await machine.start()

        assert machine.state.app_state == AppState.ERROR
        assert "offline" in machine.state.error

    @pytest.mark.asyncio
    async def test_zero_questions(self):
        """Test an empty question set ends in ERROR."""
        machine = QuizMachine(FakeContent(questions=[]))
        await machine.start()

        assert machine.state.app_state == AppState.ERROR

    @pytest.mark.asyncio
    async def test_retry_after_error(self):
        """Test restart from ERROR allows a fresh attempt."""
        content = FakeContent(generation_error=GenerationError("offline"))
        machine = QuizMachine(content)
        await machine.start()

        content.generation_error = None
        machine.restart()
        assert machine.state.app_state == AppState.WELCOME

        await machine.start()
        assert machine.state.app_state == AppState.QUIZ
        assert content.generate_calls == 2

    @pytest.mark.asyncio
    async def test_analysis_failure_uses_fallback(self):
        """Test a failed analysis shows the fallback with the real score."""
        machine = QuizMachine(FakeContent(analysis_error=AnalysisError("offline")))
        await machine.start()
        await answer_all(machine, [0, 1, 2, 0, 1])

        result = machine.state.result
        assert machine.state.app_state == AppState.RESULTS
        assert result.score == 3
        assert result.total_questions == 5
        assert result.feedback == FALLBACK_FEEDBACK
        assert result.archetype == FALLBACK_ARCHETYPE

    @pytest.mark.asyncio
    async def test_restart_resets_everything(self):
        """Test restart from RESULTS clears the session."""
        machine = QuizMachine(FakeContent())
        await machine.start()
        await answer_all(machine, [0, 1, 2, 3, 0])

        machine.restart()

        assert machine.state == SessionState()

    @pytest.mark.asyncio
    async def test_restart_discards_pending_questions(self):
        """Test questions arriving after a restart are dropped."""
        content = FakeContent()
        content.gate = asyncio.Event()
        machine = QuizMachine(content)

        task = asyncio.create_task(machine.start())
        await asyncio.sleep(0)
        assert machine.state.app_state == AppState.LOADING
        assert machine.busy

        machine.restart()
        content.gate.set()
        await task

        assert machine.state.app_state == AppState.WELCOME
        assert machine.state.questions == ()
        assert not machine.busy

    @pytest.mark.asyncio
    async def test_restart_discards_pending_analysis(self):
        """Test an analysis arriving after a restart is dropped."""
        content = FakeContent()
        machine = QuizMachine(content)
        await machine.start()
        await answer_all(machine, [0, 1, 2, 3])
        machine.select_option(0)

        content.gate = asyncio.Event()
        task = asyncio.create_task(machine.advance())
        await asyncio.sleep(0)
        assert machine.state.app_state == AppState.ANALYZING

        machine.restart()
        content.gate.set()
        await task

        assert machine.state == SessionState()

    @pytest.mark.asyncio
    async def test_single_call_in_flight(self):
        """Test a second start while loading does not issue another call."""
        content = FakeContent()
        content.gate = asyncio.Event()
        machine = QuizMachine(content)

        first = asyncio.create_task(machine.start())
        await asyncio.sleep(0)
        await machine.start()

        content.gate.set()
        await first

        assert content.generate_calls == 1
        assert machine.state.app_state == AppState.QUIZ

    @pytest.mark.asyncio
    async def test_on_change_callback(self):
        """Test observers see every accepted transition."""
        seen = []
        machine = QuizMachine(FakeContent(), on_change=lambda s: seen.append(s.app_state))

        await machine.start()
        machine.select_option(0)
        machine.select_option(1)  # rejected, no notification

        assert seen == [AppState.LOADING, AppState.QUIZ, AppState.QUIZ]

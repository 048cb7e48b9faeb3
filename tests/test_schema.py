"""
Tests for quiz data structures.
"""

import pytest
import json

from charisma_quiz.quiz.schema import AppState, Question, QuizResult, SessionState


def make_question(qid: int = 1, correct: int = 1) -> Question:
    return Question(
        id=qid,
        scenario="Ela olha para o celular enquanto você fala. O que fazer?",
        options=("Falar mais alto", "Fazer uma pergunta sobre ela", "Ir embora", "Pegar o celular"),
        correct_option_index=correct,
        explanation="Devolver o foco para ela reabre a conversa.",
    )


class TestQuestion:
    """Tests for Question."""

    def test_correct_option(self):
        """Test correct option lookup."""
        question = make_question(correct=1)

        assert question.correct_option == "Fazer uma pergunta sobre ela"
        assert question.is_correct(1)
        assert not question.is_correct(0)

    def test_to_dict_uses_wire_names(self):
        """Test serialization uses camelCase keys."""
        data = make_question().to_dict()

        assert data["correctOptionIndex"] == 1
        assert data["options"][0] == "Falar mais alto"
        assert isinstance(data["options"], list)

    def test_from_dict(self):
        """Test deserialization from provider JSON."""
        question = Question.from_dict({
            "id": 3,
            "scenario": "Cenário",
            "options": ["a", "b", "c", "d"],
            "correctOptionIndex": 2,
            "explanation": "Porque sim.",
        })

        assert question.id == 3
        assert question.options == ("a", "b", "c", "d")
        assert question.correct_option == "c"

    def test_from_dict_missing_field(self):
        """Test missing fields are rejected."""
        with pytest.raises(ValueError, match="explanation"):
            Question.from_dict({
                "id": 1,
                "scenario": "Cenário",
                "options": ["a", "b"],
                "correctOptionIndex": 0,
            })

    def test_from_dict_wrong_type(self):
        """Test mistyped fields are rejected."""
        with pytest.raises(ValueError):
            Question.from_dict({
                "id": 1,
                "scenario": "Cenário",
                "options": ["a", "b"],
                "correctOptionIndex": "0",
                "explanation": "x",
            })

    def test_from_dict_rejects_boolean_index(self):
        """Test a JSON boolean is not accepted as an index."""
        with pytest.raises(ValueError):
            Question.from_dict({
                "id": 1,
                "scenario": "Cenário",
                "options": ["a", "b"],
                "correctOptionIndex": True,
                "explanation": "x",
            })

    def test_out_of_range_index(self):
        """Test correct option index must point at an option."""
        with pytest.raises(ValueError, match="outside"):
            make_question(correct=4)

    def test_no_options(self):
        """Test a question needs options."""
        with pytest.raises(ValueError):
            Question(id=1, scenario="x", options=(), correct_option_index=0, explanation="y")

    def test_non_string_option(self):
        """Test every option must be text."""
        with pytest.raises(ValueError):
            Question.from_dict({
                "id": 1,
                "scenario": "Cenário",
                "options": ["a", 2],
                "correctOptionIndex": 0,
                "explanation": "x",
            })


class TestQuizResult:
    """Tests for QuizResult."""

    def test_percentage(self):
        """Test percentage of a 3/5 score."""
        result = QuizResult(score=3, total_questions=5, feedback="Bom.", archetype="Aprendiz")
        assert result.percentage == 60

    def test_percentage_rounds_half_up(self):
        """Test halves are rounded up."""
        # 1/8 = 12.5%
        result = QuizResult(score=1, total_questions=8, feedback="f", archetype="a")
        assert result.percentage == 13

    def test_percentage_rounds_down_below_half(self):
        """Test fractions under a half are rounded down."""
        # 1/3 = 33.33%
        result = QuizResult(score=1, total_questions=3, feedback="f", archetype="a")
        assert result.percentage == 33

    def test_perfect_and_zero(self):
        """Test bounds of the percentage."""
        assert QuizResult(score=5, total_questions=5, feedback="f", archetype="a").percentage == 100
        assert QuizResult(score=0, total_questions=5, feedback="f", archetype="a").percentage == 0

    def test_invalid_score(self):
        """Test score must be within 0..total."""
        with pytest.raises(ValueError):
            QuizResult(score=6, total_questions=5, feedback="f", archetype="a")
        with pytest.raises(ValueError):
            QuizResult(score=-1, total_questions=5, feedback="f", archetype="a")

    def test_zero_total(self):
        """Test total must be positive."""
        with pytest.raises(ValueError):
            QuizResult(score=0, total_questions=0, feedback="f", archetype="a")

    def test_to_json(self):
        """Test JSON output keeps accents and wire names."""
        result = QuizResult(score=4, total_questions=5, feedback="Ótimo", archetype="Mestre do Carisma")
        data = json.loads(result.to_json())

        assert data == {
            "score": 4,
            "totalQuestions": 5,
            "feedback": "Ótimo",
            "archetype": "Mestre do Carisma",
        }
        assert "Ótimo" in result.to_json()


class TestSessionState:
    """Tests for SessionState."""

    def test_initial_state(self):
        """Test a fresh session."""
        state = SessionState()

        assert state.app_state == AppState.WELCOME
        assert state.questions == ()
        assert state.score == 0
        assert state.result is None
        assert state.selected_option is None
        assert not state.explanation_visible
        assert state.current_question is None
        assert state.progress == 0.0

    def test_progress(self):
        """Test progress counts the current question."""
        questions = tuple(make_question(i) for i in range(1, 6))
        state = SessionState(app_state=AppState.QUIZ, questions=questions, current_question_index=1)

        assert state.total_questions == 5
        assert state.progress == pytest.approx(0.4)
        assert state.current_question.id == 2
        assert not state.is_last_question

    def test_last_question(self):
        """Test last question detection."""
        questions = (make_question(1), make_question(2))
        state = SessionState(app_state=AppState.QUIZ, questions=questions, current_question_index=1)

        assert state.is_last_question

    def test_awaiting_provider(self):
        """Test which states wait on a provider call."""
        assert SessionState(app_state=AppState.LOADING).awaiting_provider
        assert SessionState(app_state=AppState.ANALYZING).awaiting_provider
        assert not SessionState(app_state=AppState.QUIZ).awaiting_provider

    def test_immutable(self):
        """Test sessions cannot be mutated in place."""
        state = SessionState()
        with pytest.raises(AttributeError):
            state.score = 3

    def test_to_dict(self):
        """Test session serialization."""
        state = SessionState(app_state=AppState.QUIZ, questions=(make_question(),))
        data = state.to_dict()

        assert data["app_state"] == "QUIZ"
        assert data["questions"][0]["id"] == 1
        assert data["result"] is None

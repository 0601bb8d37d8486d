"""Shared fixtures: a small course with a root, a chain, and a quiz-less concept.

    A ──▶ B ──▶ C        D (no prerequisites, no quiz)
"""
import pytest

from masterygate.domain.graph.models import Concept, Course, Quiz, QuizQuestion

CORRECT = 0
WRONG = 1


def _quiz(question_count: int) -> Quiz:
    return Quiz(questions=tuple(
        QuizQuestion(
            text=f"Question {i + 1}",
            options=("right", "wrong", "also wrong"),
            answer=CORRECT,
            explanation="The first option is always right here.",
        )
        for i in range(question_count)
    ))


@pytest.fixture
def course():
    return Course(
        id="algebra",
        title="Algebra",
        concepts=[
            Concept(id="A", title="Numbers", position=0),
            Concept(id="B", title="Expressions", position=1, prerequisites=("A",)),
            Concept(id="C", title="Equations", position=2, complexity=3, prerequisites=("B",)),
            Concept(id="D", title="History of algebra", position=3),
        ],
        quizzes={"A": _quiz(5), "B": _quiz(4)},
        mastery_threshold=70,
        quiz_pass_threshold=75,
    )


@pytest.fixture
def answers():
    """answers(4, correct=3) -> three right answers followed by one wrong one."""
    def build(question_count: int, correct: int):
        return [CORRECT] * correct + [WRONG] * (question_count - correct)
    return build

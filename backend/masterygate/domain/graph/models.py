"""Course content models — pure Python, no DB or HTTP dependencies."""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple


@dataclass(frozen=True)
class Concept:
    id: str
    title: str = ""
    complexity: int = 1
    estimated_hours: float = 1.0
    position: int = 0
    prerequisites: Tuple[str, ...] = ()


@dataclass(frozen=True)
class QuizQuestion:
    text: str
    options: Tuple[str, ...]
    answer: int  # index into options
    explanation: Optional[str] = None
    question_id: Optional[str] = None


@dataclass(frozen=True)
class Quiz:
    questions: Tuple[QuizQuestion, ...] = ()

    @property
    def question_count(self) -> int:
        return len(self.questions)


@dataclass
class Course:
    id: str
    title: str
    concepts: List[Concept] = field(default_factory=list)
    quizzes: Dict[str, Quiz] = field(default_factory=dict)
    edges: List[Tuple[str, str]] = field(default_factory=list)  # (prerequisite, dependent)
    mastery_threshold: Optional[float] = None
    quiz_pass_threshold: Optional[float] = None

"""Progress domain models — pure Python, no DB or HTTP dependencies."""
from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple


class ProgressStatus(str, Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class EventType(str, Enum):
    MARK_DESCRIPTION_READ = "mark_description_read"
    MARK_VIDEO_WATCHED = "mark_video_watched"
    SUBMIT_QUIZ = "submit_quiz"
    RESET_PROGRESS = "reset_progress"


@dataclass(frozen=True)
class ProgressEvent:
    type: EventType
    answers: Optional[Tuple[Optional[int], ...]] = None  # submit_quiz only
    time_spent_seconds: int = 0

    @classmethod
    def mark_description_read(cls, time_spent_seconds: int = 0) -> "ProgressEvent":
        return cls(EventType.MARK_DESCRIPTION_READ, time_spent_seconds=time_spent_seconds)

    @classmethod
    def mark_video_watched(cls, time_spent_seconds: int = 0) -> "ProgressEvent":
        return cls(EventType.MARK_VIDEO_WATCHED, time_spent_seconds=time_spent_seconds)

    @classmethod
    def submit_quiz(cls, answers, time_spent_seconds: int = 0) -> "ProgressEvent":
        return cls(EventType.SUBMIT_QUIZ, answers=tuple(answers), time_spent_seconds=time_spent_seconds)

    @classmethod
    def reset_progress(cls) -> "ProgressEvent":
        return cls(EventType.RESET_PROGRESS)


@dataclass
class UserConceptProgress:
    course_id: str
    user_id: str
    concept_id: str
    status: ProgressStatus = ProgressStatus.NOT_STARTED
    description_read: bool = False
    video_watched: bool = False
    quiz_passed: bool = False
    mastery_score: Optional[float] = None  # None until passed since the last reset
    attempts: int = 0
    last_score_percent: Optional[float] = None
    time_spent_seconds: int = 0
    last_accessed_at: Optional[str] = None


@dataclass(frozen=True)
class QuestionReview:
    """How one question was answered, for the review shown after a submission."""
    index: int
    question_id: Optional[str]
    given: Optional[int]  # None when left unanswered
    correct_answer: int
    is_correct: bool
    explanation: Optional[str] = None


@dataclass(frozen=True)
class QuizResult:
    score: int  # correct answers
    question_count: int
    percent: float
    passed: bool
    review: Tuple[QuestionReview, ...] = ()


@dataclass
class UpdatedProgress:
    progress: UserConceptProgress
    quiz_result: Optional[QuizResult] = None
    unlocked: List[str] = field(default_factory=list)  # dependents newly attemptable
    relocked: List[str] = field(default_factory=list)  # dependents no longer attemptable
    eligible_dependents: List[str] = field(default_factory=list)

    @property
    def downstream_unlocked(self) -> bool:
        return bool(self.unlocked)


@dataclass(frozen=True)
class ConceptNode:
    """Read-only projection of one concept for a learner's course view."""
    concept_id: str
    title: str
    position: int
    status: ProgressStatus
    mastery_score: Optional[float]
    attempts: int
    unlocked: bool


@dataclass(frozen=True)
class CourseSummary:
    user_id: str
    course_id: str
    concepts_completed: int
    total_concepts: int
    overall_progress: int  # percent, rounded
    time_spent_seconds: int
    last_accessed_at: Optional[str]
    next_concept_id: Optional[str]
    nodes: Tuple[ConceptNode, ...] = ()

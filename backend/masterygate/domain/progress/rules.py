"""Business rules for concept progress — enforces the per-(user, concept) state machine.

    not_started ──read/watch──▶ in_progress ──quiz passed──▶ completed
         ▲                                                     │
         └──────────────── quiz failed / reset ◀───────────────┘

Every function here is pure: it takes a record, returns a new one, and never
touches storage. A failed or reset concept goes back to not_started.
"""
from __future__ import annotations
from dataclasses import replace
from typing import Optional, Sequence

from masterygate.domain.common import codes
from masterygate.domain.common.result import Result
from masterygate.domain.graph.models import Quiz, QuizQuestion
from masterygate.domain.progress.models import (
    ProgressStatus,
    QuestionReview,
    QuizResult,
    UserConceptProgress,
)


def _started(status: ProgressStatus) -> ProgressStatus:
    return ProgressStatus.IN_PROGRESS if status == ProgressStatus.NOT_STARTED else status


def _touched(record: UserConceptProgress, now: str, time_spent_seconds: int) -> UserConceptProgress:
    return replace(
        record,
        last_accessed_at=now,
        time_spent_seconds=record.time_spent_seconds + max(0, time_spent_seconds),
    )


def mark_description_read(record: UserConceptProgress, now: str, time_spent_seconds: int = 0) -> UserConceptProgress:
    if record.description_read:
        return record
    record = _touched(record, now, time_spent_seconds)
    return replace(record, description_read=True, status=_started(record.status))


def mark_video_watched(record: UserConceptProgress, now: str, time_spent_seconds: int = 0) -> UserConceptProgress:
    if record.video_watched:
        return record
    record = _touched(record, now, time_spent_seconds)
    return replace(record, video_watched=True, status=_started(record.status))


def reset(record: UserConceptProgress, now: str) -> UserConceptProgress:
    """Full reset. attempts and time spent are audit fields and survive."""
    return replace(
        record,
        status=ProgressStatus.NOT_STARTED,
        description_read=False,
        video_watched=False,
        quiz_passed=False,
        mastery_score=None,
        last_accessed_at=now,
    )


def _is_option(answer, question: QuizQuestion) -> bool:
    return isinstance(answer, int) and not isinstance(answer, bool) and 0 <= answer < len(question.options)


def score_quiz(quiz: Optional[Quiz], answers: Optional[Sequence[Optional[int]]], pass_threshold: float) -> Result[QuizResult]:
    """
    Score a submission. Rejects it, without scoring, when there is no quiz or
    when the answers cannot be lined up with the questions. An unanswered
    question (None) is simply wrong.
    """
    if quiz is None or quiz.question_count == 0:
        return Result.fail("This concept has no quiz.", code=codes.QUIZ_NOT_DEFINED)
    if answers is None or len(answers) != quiz.question_count:
        got = 0 if answers is None else len(answers)
        return Result.fail(
            f"Expected {quiz.question_count} answers, got {got}.",
            code=codes.MALFORMED_SUBMISSION,
        )

    review = []
    for index, (question, answer) in enumerate(zip(quiz.questions, answers)):
        if answer is not None and not _is_option(answer, question):
            return Result.fail(
                f"Answer {answer!r} for question {index + 1} is not one of its {len(question.options)} options.",
                code=codes.MALFORMED_SUBMISSION,
            )
        review.append(QuestionReview(
            index=index,
            question_id=question.question_id,
            given=answer,
            correct_answer=question.answer,
            is_correct=answer == question.answer,
            explanation=question.explanation,
        ))

    score = sum(1 for item in review if item.is_correct)
    percent = score / quiz.question_count * 100
    return Result.ok(QuizResult(
        score=score,
        question_count=quiz.question_count,
        percent=percent,
        passed=percent >= pass_threshold,
        review=tuple(review),
    ))


def apply_quiz_result(record: UserConceptProgress, result: QuizResult, now: str, time_spent_seconds: int = 0) -> UserConceptProgress:
    record = _touched(record, now, time_spent_seconds)
    record = replace(record, attempts=record.attempts + 1, last_score_percent=result.percent)
    if not result.passed:
        return reset(record, now)
    return replace(
        record,
        quiz_passed=True,
        mastery_score=result.percent,
        status=ProgressStatus.COMPLETED,
    )

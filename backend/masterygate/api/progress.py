"""Learner progress API endpoints — eligibility, events, course summary."""
from __future__ import annotations
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from masterygate.application.course_app_service import CourseAppService
from masterygate.application.progress_engine import ProgressEngine
from masterygate.container import get_course_app_service
from masterygate.domain.common import codes
from masterygate.domain.common.result import Result
from masterygate.domain.progress.models import (
    CourseSummary,
    EventType,
    ProgressEvent,
    QuizResult,
    UpdatedProgress,
    UserConceptProgress,
)

router = APIRouter(tags=["progress"])

_STATUS_BY_CODE = {
    codes.UNKNOWN_COURSE: status.HTTP_404_NOT_FOUND,
    codes.UNKNOWN_CONCEPT: status.HTTP_404_NOT_FOUND,
    codes.COURSE_MISCONFIGURED: status.HTTP_500_INTERNAL_SERVER_ERROR,
    codes.CONCEPT_NOT_ATTEMPTABLE: status.HTTP_403_FORBIDDEN,
    codes.QUIZ_NOT_DEFINED: status.HTTP_400_BAD_REQUEST,
    codes.MALFORMED_SUBMISSION: status.HTTP_422_UNPROCESSABLE_ENTITY,
    codes.UNKNOWN_EVENT: status.HTTP_400_BAD_REQUEST,
}


# ------------------------------------------------------------------
# Pydantic schemas
# ------------------------------------------------------------------
class ProgressEventBody(BaseModel):
    action: Literal[
        "mark_description_read",
        "mark_video_watched",
        "submit_quiz",
        "reset_progress",
    ]
    answers: Optional[List[Optional[int]]] = None
    time_spent_seconds: int = Field(default=0, ge=0)


# ------------------------------------------------------------------
# Serializers
# ------------------------------------------------------------------
def _serialize_progress(p: UserConceptProgress) -> dict:
    return {
        "course_id": p.course_id,
        "user_id": p.user_id,
        "concept_id": p.concept_id,
        "status": p.status.value,
        "description_read": p.description_read,
        "video_watched": p.video_watched,
        "quiz_passed": p.quiz_passed,
        "mastery_score": p.mastery_score,
        "attempts": p.attempts,
        "last_score_percent": p.last_score_percent,
        "time_spent_seconds": p.time_spent_seconds,
        "last_accessed_at": p.last_accessed_at,
    }


def _serialize_quiz_result(q: QuizResult) -> dict:
    return {
        "score": q.score,
        "question_count": q.question_count,
        "percent": q.percent,
        "passed": q.passed,
        "review": [
            {
                "index": r.index,
                "question_id": r.question_id,
                "given": r.given,
                "correct_answer": r.correct_answer,
                "is_correct": r.is_correct,
                "explanation": r.explanation,
            }
            for r in q.review
        ],
    }


def _serialize_update(u: UpdatedProgress) -> dict:
    return {
        "progress": _serialize_progress(u.progress),
        "quiz_result": _serialize_quiz_result(u.quiz_result) if u.quiz_result else None,
        "downstream_unlocked": u.downstream_unlocked,
        "unlocked": u.unlocked,
        "relocked": u.relocked,
        "eligible_dependents": u.eligible_dependents,
    }


def _serialize_summary(s: CourseSummary) -> dict:
    return {
        "user_id": s.user_id,
        "course_id": s.course_id,
        "concepts_completed": s.concepts_completed,
        "total_concepts": s.total_concepts,
        "overall_progress": s.overall_progress,
        "time_spent_seconds": s.time_spent_seconds,
        "last_accessed_at": s.last_accessed_at,
        "next_concept_id": s.next_concept_id,
        "concepts": [
            {
                "concept_id": n.concept_id,
                "title": n.title,
                "position": n.position,
                "status": n.status.value,
                "mastery_score": n.mastery_score,
                "attempts": n.attempts,
                "unlocked": n.unlocked,
            }
            for n in s.nodes
        ],
    }


def _raise_for(result: Result) -> None:
    raise HTTPException(
        status_code=_STATUS_BY_CODE.get(result.code, status.HTTP_400_BAD_REQUEST),
        detail=result.error,
    )


def _engine(course_id: str, svc: CourseAppService) -> ProgressEngine:
    result = svc.get_engine(course_id)
    if not result.is_success:
        _raise_for(result)
    return result.value


def _to_event(body: ProgressEventBody) -> ProgressEvent:
    event_type = EventType(body.action)
    if event_type == EventType.SUBMIT_QUIZ:
        return ProgressEvent.submit_quiz(body.answers or [], body.time_spent_seconds)
    return ProgressEvent(event_type, time_spent_seconds=body.time_spent_seconds)


# ------------------------------------------------------------------
# Health check
# ------------------------------------------------------------------
@router.get("/health")
def health():
    return {"status": "ok"}


# ------------------------------------------------------------------
# Course endpoints
# ------------------------------------------------------------------
@router.get("/courses/")
def list_courses(svc: CourseAppService = Depends(get_course_app_service)):
    return svc.list_course_ids()


@router.get("/courses/{course_id}/users/{user_id}/eligible")
def eligible_concepts(
    course_id: str,
    user_id: str,
    svc: CourseAppService = Depends(get_course_app_service),
):
    engine = _engine(course_id, svc)
    return sorted(engine.current_eligible_set(user_id))


@router.get("/courses/{course_id}/users/{user_id}/next")
def next_concept(
    course_id: str,
    user_id: str,
    svc: CourseAppService = Depends(get_course_app_service),
):
    engine = _engine(course_id, svc)
    return {"concept_id": engine.next_concept(user_id)}


@router.get("/courses/{course_id}/users/{user_id}/summary")
def course_summary(
    course_id: str,
    user_id: str,
    svc: CourseAppService = Depends(get_course_app_service),
):
    engine = _engine(course_id, svc)
    return _serialize_summary(engine.course_summary(user_id))


# ------------------------------------------------------------------
# Concept progress endpoints
# ------------------------------------------------------------------
@router.get("/courses/{course_id}/users/{user_id}/concepts/{concept_id}/progress")
def get_progress(
    course_id: str,
    user_id: str,
    concept_id: str,
    svc: CourseAppService = Depends(get_course_app_service),
):
    engine = _engine(course_id, svc)
    record = engine.get_progress(user_id, concept_id)
    if record is None:
        raise HTTPException(status_code=404, detail=f"Concept '{concept_id}' not found.")
    data = _serialize_progress(record)
    data["can_attempt"] = engine.can_attempt(user_id, concept_id)
    return data


@router.post("/courses/{course_id}/users/{user_id}/concepts/{concept_id}/progress")
def apply_progress_event(
    course_id: str,
    user_id: str,
    concept_id: str,
    body: ProgressEventBody,
    svc: CourseAppService = Depends(get_course_app_service),
):
    engine = _engine(course_id, svc)
    result = engine.apply_event(user_id, concept_id, _to_event(body))
    if not result.is_success:
        _raise_for(result)
    return _serialize_update(result.value)

"""SQLite implementation of ProgressRepository."""
from __future__ import annotations
from typing import Iterable, List, Optional

from masterygate.domain.progress.models import ProgressStatus, UserConceptProgress
from masterygate.persistence.db import get_connection
from masterygate.persistence.interfaces.progress_repository import ProgressRepository


def _row_to_progress(row) -> UserConceptProgress:
    return UserConceptProgress(
        course_id=row["course_id"],
        user_id=row["user_id"],
        concept_id=row["concept_id"],
        status=ProgressStatus(row["status"]),
        description_read=bool(row["description_read"]),
        video_watched=bool(row["video_watched"]),
        quiz_passed=bool(row["quiz_passed"]),
        mastery_score=row["mastery_score"],
        attempts=row["attempts"],
        last_score_percent=row["last_score_percent"],
        time_spent_seconds=row["time_spent_seconds"],
        last_accessed_at=row["last_accessed_at"],
    )


class SqliteProgressRepository(ProgressRepository):

    def __init__(self, database_path: Optional[str] = None):
        self._database_path = database_path

    def get(self, course_id: str, user_id: str, concept_id: str) -> Optional[UserConceptProgress]:
        conn = get_connection(self._database_path)
        try:
            row = conn.execute(
                "SELECT * FROM concept_progress WHERE course_id = ? AND user_id = ? AND concept_id = ?",
                (course_id, user_id, concept_id),
            ).fetchone()
        finally:
            conn.close()
        return _row_to_progress(row) if row else None

    def save(self, record: UserConceptProgress) -> None:
        conn = get_connection(self._database_path)
        try:
            conn.execute(
                """
                INSERT INTO concept_progress (
                    course_id, user_id, concept_id, status,
                    description_read, video_watched, quiz_passed,
                    mastery_score, attempts, last_score_percent,
                    time_spent_seconds, last_accessed_at
                ) VALUES (
                    :course_id, :user_id, :concept_id, :status,
                    :description_read, :video_watched, :quiz_passed,
                    :mastery_score, :attempts, :last_score_percent,
                    :time_spent_seconds, :last_accessed_at
                )
                ON CONFLICT(course_id, user_id, concept_id) DO UPDATE SET
                    status             = excluded.status,
                    description_read   = excluded.description_read,
                    video_watched      = excluded.video_watched,
                    quiz_passed        = excluded.quiz_passed,
                    mastery_score      = excluded.mastery_score,
                    attempts           = excluded.attempts,
                    last_score_percent = excluded.last_score_percent,
                    time_spent_seconds = excluded.time_spent_seconds,
                    last_accessed_at   = excluded.last_accessed_at
                """,
                {
                    "course_id": record.course_id,
                    "user_id": record.user_id,
                    "concept_id": record.concept_id,
                    "status": record.status.value,
                    "description_read": int(record.description_read),
                    "video_watched": int(record.video_watched),
                    "quiz_passed": int(record.quiz_passed),
                    "mastery_score": record.mastery_score,
                    "attempts": record.attempts,
                    "last_score_percent": record.last_score_percent,
                    "time_spent_seconds": record.time_spent_seconds,
                    "last_accessed_at": record.last_accessed_at,
                },
            )
            conn.commit()
        finally:
            conn.close()

    def list_for_user(self, course_id: str, user_id: str, concept_ids: Iterable[str]) -> List[UserConceptProgress]:
        wanted = set(concept_ids)
        if not wanted:
            return []
        conn = get_connection(self._database_path)
        try:
            rows = conn.execute(
                "SELECT * FROM concept_progress WHERE course_id = ? AND user_id = ? ORDER BY concept_id ASC",
                (course_id, user_id),
            ).fetchall()
        finally:
            conn.close()
        return [_row_to_progress(r) for r in rows if r["concept_id"] in wanted]

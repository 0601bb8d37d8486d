"""Domain service — pure business logic for progress transitions and unlock propagation."""
from __future__ import annotations
from datetime import datetime, timezone
from typing import Dict, Mapping, Optional

from masterygate.domain.common import codes
from masterygate.domain.common.result import Result
from masterygate.domain.graph.graph import PrerequisiteGraph
from masterygate.domain.graph.models import Quiz
from masterygate.domain.progress import rules
from masterygate.domain.progress.models import (
    EventType,
    ProgressEvent,
    UpdatedProgress,
    UserConceptProgress,
)


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class ProgressDomainService:
    """
    Pure domain operations — no I/O. All methods return Result[T].
    The application layer loads the record and mastery snapshot, calls
    apply_event, and persists the returned record.
    """

    def __init__(
        self,
        graph: PrerequisiteGraph,
        quizzes: Mapping[str, Quiz],
        mastery_threshold: float,
        quiz_pass_threshold: float,
    ):
        self.graph = graph
        self.quizzes = quizzes
        self.mastery_threshold = mastery_threshold
        self.quiz_pass_threshold = quiz_pass_threshold

    def can_attempt(self, concept_id: str, mastery_map: Mapping[str, Optional[float]]) -> bool:
        return self.graph.can_attempt(concept_id, mastery_map, self.mastery_threshold)

    def apply_event(
        self,
        record: UserConceptProgress,
        event: ProgressEvent,
        mastery_map: Mapping[str, Optional[float]],
        now: Optional[str] = None,
    ) -> Result[UpdatedProgress]:
        """
        Apply one learner event to one (user, concept) record.

        mastery_map is the learner's snapshot for the whole course; it is only
        read. Failures leave the record untouched.
        """
        concept_id = record.concept_id
        if concept_id not in self.graph:
            return Result.fail(f"Concept '{concept_id}' not found.", code=codes.UNKNOWN_CONCEPT)
        now = now or now_iso()

        if event.type == EventType.RESET_PROGRESS:
            updated = rules.reset(record, now)
            return Result.ok(self._propagate(record, updated, mastery_map))

        if not self.can_attempt(concept_id, mastery_map):
            missing = sorted(
                pid for pid in self.graph.prerequisites_of(concept_id)
                if (mastery_map.get(pid) or 0.0) < self.mastery_threshold
            )
            return Result.fail(
                f"Concept '{concept_id}' is locked. Master first: {', '.join(missing)}.",
                code=codes.CONCEPT_NOT_ATTEMPTABLE,
            )

        if event.type == EventType.MARK_DESCRIPTION_READ:
            updated = rules.mark_description_read(record, now, event.time_spent_seconds)
            return Result.ok(UpdatedProgress(progress=updated))

        if event.type == EventType.MARK_VIDEO_WATCHED:
            updated = rules.mark_video_watched(record, now, event.time_spent_seconds)
            return Result.ok(UpdatedProgress(progress=updated))

        if event.type == EventType.SUBMIT_QUIZ:
            scored = rules.score_quiz(self.quizzes.get(concept_id), event.answers, self.quiz_pass_threshold)
            if not scored.is_success:
                return Result.fail(scored.error, code=scored.code)
            updated = rules.apply_quiz_result(record, scored.value, now, event.time_spent_seconds)
            result = self._propagate(record, updated, mastery_map)
            result.quiz_result = scored.value
            return Result.ok(result)

        return Result.fail(f"Unsupported event '{event.type}'.", code=codes.UNKNOWN_EVENT)

    def _propagate(
        self,
        before: UserConceptProgress,
        after: UserConceptProgress,
        mastery_map: Mapping[str, Optional[float]],
    ) -> UpdatedProgress:
        """Re-evaluate the direct dependents against the old and new mastery."""
        old_map: Dict[str, Optional[float]] = dict(mastery_map)
        old_map[before.concept_id] = before.mastery_score
        new_map = dict(old_map)
        new_map[after.concept_id] = after.mastery_score

        unlocked, relocked, eligible = [], [], []
        for dependent_id in sorted(self.graph.dependents_of(after.concept_id)):
            was = self.can_attempt(dependent_id, old_map)
            now_ok = self.can_attempt(dependent_id, new_map)
            if now_ok:
                eligible.append(dependent_id)
            if now_ok and not was:
                unlocked.append(dependent_id)
            elif was and not now_ok:
                relocked.append(dependent_id)
        return UpdatedProgress(
            progress=after,
            unlocked=unlocked,
            relocked=relocked,
            eligible_dependents=eligible,
        )

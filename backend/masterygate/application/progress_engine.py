"""Application service: lock, load, apply the domain transition, persist. One engine per course."""
from __future__ import annotations
import logging
import threading
import weakref
from contextlib import contextmanager
from typing import FrozenSet, Iterator, List, Optional, Tuple

from masterygate.core import config
from masterygate.domain.common import codes
from masterygate.domain.common.result import Result
from masterygate.domain.graph.graph import PrerequisiteGraph
from masterygate.domain.graph.models import Course
from masterygate.domain.progress.models import (
    ConceptNode,
    CourseSummary,
    ProgressEvent,
    ProgressStatus,
    UpdatedProgress,
    UserConceptProgress,
)
from masterygate.domain.progress.service import ProgressDomainService
from masterygate.persistence.interfaces.progress_repository import ProgressRepository

logger = logging.getLogger(__name__)


class KeyedLocks:
    """One lock per key, created on demand and dropped once nobody holds it."""

    def __init__(self):
        self._locks: "weakref.WeakValueDictionary[Tuple[str, ...], threading.Lock]" = weakref.WeakValueDictionary()
        self._guard = threading.Lock()

    @contextmanager
    def hold(self, key: Tuple[str, ...]) -> Iterator[None]:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.Lock()
                self._locks[key] = lock
        with lock:
            yield


class ProgressEngine:
    """
    Progress state machine for every learner of one course.

    Writes are serialized per (course_id, user_id, concept_id); different
    concepts or different learners proceed in parallel. Engines that share a
    KeyedLocks registry keep serializing across a course reload.

    Eligibility is decided on a mastery snapshot read inside that lock, so it
    can be momentarily stale with respect to concurrent writes on the
    learner's other concepts.
    """

    def __init__(
        self,
        course: Course,
        graph: PrerequisiteGraph,
        repo: ProgressRepository,
        mastery_threshold: Optional[float] = None,
        quiz_pass_threshold: Optional[float] = None,
        locks: Optional[KeyedLocks] = None,
    ):
        self.course = course
        self.graph = graph
        self._repo = repo
        self._locks = locks if locks is not None else KeyedLocks()
        self._domain = ProgressDomainService(
            graph=graph,
            quizzes=course.quizzes,
            mastery_threshold=_first_set("mastery_threshold", mastery_threshold, course.mastery_threshold, config.MASTERY_THRESHOLD),
            quiz_pass_threshold=_first_set("quiz_pass_threshold", quiz_pass_threshold, course.quiz_pass_threshold, config.QUIZ_PASS_THRESHOLD),
        )

    @classmethod
    def for_course(cls, course: Course, repo: ProgressRepository, **options) -> "ProgressEngine":
        """Build the course graph and wrap it. Raises CourseConfigurationError, or ValueError when a threshold is unset everywhere."""
        graph = PrerequisiteGraph.build(course.concepts, course.edges)
        logger.info("Course %s loaded: %d concepts", course.id, len(graph))
        return cls(course, graph, repo, **options)

    @property
    def mastery_threshold(self) -> float:
        return self._domain.mastery_threshold

    @property
    def quiz_pass_threshold(self) -> float:
        return self._domain.quiz_pass_threshold

    def _blank(self, user_id: str, concept_id: str) -> UserConceptProgress:
        return UserConceptProgress(course_id=self.course.id, user_id=user_id, concept_id=concept_id)

    def _mastery_map(self, user_id: str):
        return self._repo.get_mastery_map(self.course.id, user_id, self.graph.concept_ids())

    # ------------------------------------------------------------------
    # READ
    # ------------------------------------------------------------------
    def can_attempt(self, user_id: str, concept_id: str) -> bool:
        return self._domain.can_attempt(concept_id, self._mastery_map(user_id))

    def current_eligible_set(self, user_id: str) -> FrozenSet[str]:
        mastery = self._mastery_map(user_id)
        return frozenset(cid for cid in self.graph.concept_ids() if self._domain.can_attempt(cid, mastery))

    def get_progress(self, user_id: str, concept_id: str) -> Optional[UserConceptProgress]:
        """Stored record, a blank one for an untouched concept, or None for an unknown concept."""
        if concept_id not in self.graph:
            return None
        return self._repo.get(self.course.id, user_id, concept_id) or self._blank(user_id, concept_id)

    def next_concept(self, user_id: str) -> Optional[str]:
        records = {r.concept_id: r for r in self._repo.list_for_user(self.course.id, user_id, self.graph.concept_ids())}
        return self._next_concept(records)

    def _next_concept(self, records) -> Optional[str]:
        mastery = {cid: r.mastery_score for cid, r in records.items()}
        for concept_id in self.graph.topological_order():
            record = records.get(concept_id)
            if record and record.status == ProgressStatus.COMPLETED:
                continue
            if self._domain.can_attempt(concept_id, mastery):
                return concept_id
        return None

    def course_summary(self, user_id: str) -> CourseSummary:
        records = {r.concept_id: r for r in self._repo.list_for_user(self.course.id, user_id, self.graph.concept_ids())}
        mastery = {cid: r.mastery_score for cid, r in records.items()}

        nodes: List[ConceptNode] = []
        for concept_id in self.graph.topological_order():
            concept = self.graph.concept(concept_id)
            record = records.get(concept_id)
            nodes.append(ConceptNode(
                concept_id=concept_id,
                title=concept.title,
                position=concept.position,
                status=record.status if record else ProgressStatus.NOT_STARTED,
                mastery_score=record.mastery_score if record else None,
                attempts=record.attempts if record else 0,
                unlocked=self._domain.can_attempt(concept_id, mastery),
            ))

        total = len(nodes)
        completed = sum(1 for n in nodes if n.status == ProgressStatus.COMPLETED)
        accessed = [r.last_accessed_at for r in records.values() if r.last_accessed_at]
        return CourseSummary(
            user_id=user_id,
            course_id=self.course.id,
            concepts_completed=completed,
            total_concepts=total,
            overall_progress=round(completed / total * 100) if total else 0,
            time_spent_seconds=sum(r.time_spent_seconds for r in records.values()),
            last_accessed_at=max(accessed) if accessed else None,
            next_concept_id=self._next_concept(records),
            nodes=tuple(nodes),
        )

    # ------------------------------------------------------------------
    # EVENTS
    # ------------------------------------------------------------------
    def apply_event(self, user_id: str, concept_id: str, event: ProgressEvent) -> Result[UpdatedProgress]:
        if concept_id not in self.graph:
            return Result.fail(f"Concept '{concept_id}' not found.", code=codes.UNKNOWN_CONCEPT)

        with self._locks.hold((self.course.id, user_id, concept_id)):
            record = self._repo.get(self.course.id, user_id, concept_id) or self._blank(user_id, concept_id)
            result = self._domain.apply_event(record, event, self._mastery_map(user_id))
            if not result.is_success:
                logger.warning(
                    "Rejected %s for user=%s concept=%s: %s",
                    event.type.value, user_id, concept_id, result.error,
                )
                return result

            updated = result.value
            if updated.progress == record:
                logger.debug("No-op %s for user=%s concept=%s", event.type.value, user_id, concept_id)
            else:
                self._repo.save(updated.progress)

        if updated.quiz_result is not None:
            logger.info(
                "Quiz %s for user=%s concept=%s: %d/%d (%.0f%%), attempts=%d, unlocked=%s",
                "passed" if updated.quiz_result.passed else "failed",
                user_id, concept_id,
                updated.quiz_result.score, updated.quiz_result.question_count,
                updated.quiz_result.percent, updated.progress.attempts, updated.unlocked,
            )
        return result


def _first_set(name: str, *values) -> float:
    for value in values:
        if value is not None:
            return value
    raise ValueError(f"No {name} configured for this course.")

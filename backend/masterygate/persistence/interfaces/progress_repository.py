"""Abstract repository interface for per-(course, user, concept) progress records."""
from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Optional

from masterygate.domain.progress.models import UserConceptProgress


class ProgressRepository(ABC):
    """Concept ids are only unique within a course, so every lookup is scoped by course_id."""

    @abstractmethod
    def get(self, course_id: str, user_id: str, concept_id: str) -> Optional[UserConceptProgress]:
        """Return the stored record, or None if the learner never touched the concept."""
        ...

    @abstractmethod
    def save(self, record: UserConceptProgress) -> None:
        """Insert or replace the record keyed by (course_id, user_id, concept_id)."""
        ...

    @abstractmethod
    def list_for_user(self, course_id: str, user_id: str, concept_ids: Iterable[str]) -> List[UserConceptProgress]:
        """Return the stored records among concept_ids; untouched concepts are omitted."""
        ...

    def get_mastery_map(self, course_id: str, user_id: str, concept_ids: Iterable[str]) -> Dict[str, Optional[float]]:
        """Point-in-time mastery snapshot; concepts without a record are absent."""
        return {r.concept_id: r.mastery_score for r in self.list_for_user(course_id, user_id, concept_ids)}

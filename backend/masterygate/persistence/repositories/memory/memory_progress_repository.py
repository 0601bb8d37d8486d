"""In-process implementation of ProgressRepository, for embedding and tests."""
from __future__ import annotations
import threading
from dataclasses import replace
from typing import Dict, Iterable, List, Optional, Tuple

from masterygate.domain.progress.models import UserConceptProgress
from masterygate.persistence.interfaces.progress_repository import ProgressRepository


class InMemoryProgressRepository(ProgressRepository):

    def __init__(self):
        self._records: Dict[Tuple[str, str, str], UserConceptProgress] = {}
        self._lock = threading.Lock()

    def get(self, course_id: str, user_id: str, concept_id: str) -> Optional[UserConceptProgress]:
        with self._lock:
            record = self._records.get((course_id, user_id, concept_id))
        return replace(record) if record else None

    def save(self, record: UserConceptProgress) -> None:
        with self._lock:
            self._records[(record.course_id, record.user_id, record.concept_id)] = replace(record)

    def list_for_user(self, course_id: str, user_id: str, concept_ids: Iterable[str]) -> List[UserConceptProgress]:
        with self._lock:
            found = [self._records.get((course_id, user_id, cid)) for cid in sorted(set(concept_ids))]
        return [replace(r) for r in found if r is not None]

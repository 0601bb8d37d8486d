"""Abstract repository interface for course definitions."""
from __future__ import annotations
from abc import ABC, abstractmethod
from typing import List, Optional

from masterygate.domain.graph.models import Course


class CourseRepository(ABC):

    @abstractmethod
    def get(self, course_id: str) -> Optional[Course]:
        """Return the course definition, or None if unknown."""
        ...

    @abstractmethod
    def list_ids(self) -> List[str]:
        """Return every known course id, sorted."""
        ...

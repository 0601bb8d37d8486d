"""Course configuration errors raised while building a prerequisite graph.

These are fatal to course load: a course whose graph cannot be built is not
served until its definition is fixed.
"""
from __future__ import annotations
from typing import Sequence


class CourseConfigurationError(Exception):
    """Base class for course definition errors."""


class CycleDetected(CourseConfigurationError):
    def __init__(self, concept_ids: Sequence[str]):
        self.concept_ids = tuple(concept_ids)
        super().__init__(
            "Prerequisite cycle detected among concepts: " + ", ".join(self.concept_ids)
        )


class DanglingEdge(CourseConfigurationError):
    def __init__(self, prerequisite_id: str, dependent_id: str, missing_id: str):
        self.prerequisite_id = prerequisite_id
        self.dependent_id = dependent_id
        self.missing_id = missing_id
        super().__init__(
            f"Edge '{prerequisite_id}' → '{dependent_id}' references unknown concept '{missing_id}'."
        )


class DuplicateConcept(CourseConfigurationError):
    def __init__(self, concept_id: str):
        self.concept_id = concept_id
        super().__init__(f"Concept id '{concept_id}' is defined more than once.")


class InvalidCourseDefinition(CourseConfigurationError):
    """The course document itself is unreadable or fails validation."""

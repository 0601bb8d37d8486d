"""Course definitions stored as JSON documents, one <course_id>.json per course."""
from __future__ import annotations
import json
import logging
import os
from typing import List, Optional

from pydantic import BaseModel, Field, ValidationError, model_validator

from masterygate.domain.graph.errors import InvalidCourseDefinition
from masterygate.domain.graph.models import Concept, Course, Quiz, QuizQuestion
from masterygate.persistence.interfaces.course_repository import CourseRepository

logger = logging.getLogger(__name__)


# ------------------------------------------------------------------
# Document schema
# ------------------------------------------------------------------
class QuestionDoc(BaseModel):
    question_id: Optional[str] = None
    text: str
    options: List[str] = Field(min_length=1)
    answer: int
    explanation: Optional[str] = None

    @model_validator(mode="after")
    def _answer_in_range(self):
        if not 0 <= self.answer < len(self.options):
            raise ValueError(f"answer index {self.answer} is outside the {len(self.options)} options")
        return self


class QuizDoc(BaseModel):
    questions: List[QuestionDoc] = []


class ConceptDoc(BaseModel):
    id: str = Field(min_length=1)
    title: str = ""
    complexity: int = Field(default=1, ge=1)
    est_learning_time_hours: float = Field(default=1.0, ge=0)
    position: Optional[int] = None
    prerequisites: List[str] = []
    quiz: Optional[QuizDoc] = None


class CourseDoc(BaseModel):
    id: str = Field(min_length=1)
    title: str = ""
    mastery_threshold: Optional[float] = Field(default=None, ge=0, le=100)
    quiz_pass_threshold: Optional[float] = Field(default=None, ge=0, le=100)
    concepts: List[ConceptDoc] = []
    edges: List[List[str]] = []

    @model_validator(mode="after")
    def _edges_are_pairs(self):
        for edge in self.edges:
            if len(edge) != 2:
                raise ValueError(f"edge {edge!r} must be [prerequisite, dependent]")
        return self


def course_from_dict(data: dict) -> Course:
    """Validate a course document and convert it to the domain model."""
    try:
        doc = CourseDoc.model_validate(data)
    except ValidationError as e:
        raise InvalidCourseDefinition(f"Invalid course definition: {e}") from e

    concepts, quizzes = [], {}
    for index, c in enumerate(doc.concepts):
        concepts.append(Concept(
            id=c.id,
            title=c.title or c.id,
            complexity=c.complexity,
            estimated_hours=c.est_learning_time_hours,
            position=c.position if c.position is not None else index,
            prerequisites=tuple(c.prerequisites),
        ))
        if c.quiz and c.quiz.questions:
            quizzes[c.id] = Quiz(questions=tuple(
                QuizQuestion(
                    text=q.text,
                    options=tuple(q.options),
                    answer=q.answer,
                    explanation=q.explanation,
                    question_id=q.question_id,
                )
                for q in c.quiz.questions
            ))

    return Course(
        id=doc.id,
        title=doc.title or doc.id,
        concepts=concepts,
        quizzes=quizzes,
        edges=[(e[0], e[1]) for e in doc.edges],
        mastery_threshold=doc.mastery_threshold,
        quiz_pass_threshold=doc.quiz_pass_threshold,
    )


class JsonCourseRepository(CourseRepository):

    def __init__(self, courses_dir: str):
        self._courses_dir = courses_dir

    def _path(self, course_id: str) -> str:
        return os.path.join(self._courses_dir, f"{course_id}.json")

    def get(self, course_id: str) -> Optional[Course]:
        # Ids are file names; refuse anything that could leave the directory.
        if not course_id or os.path.basename(course_id) != course_id or course_id.startswith("."):
            return None
        path = self._path(course_id)
        if not os.path.isfile(path):
            return None
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise InvalidCourseDefinition(f"Course file {path} is not valid JSON: {e}") from e
        course = course_from_dict(data)
        if course.id != course_id:
            raise InvalidCourseDefinition(
                f"Course file {path} declares id '{course.id}', expected '{course_id}'."
            )
        logger.debug("Loaded course %s from %s", course_id, path)
        return course

    def list_ids(self) -> List[str]:
        if not os.path.isdir(self._courses_dir):
            return []
        return sorted(
            name[: -len(".json")]
            for name in os.listdir(self._courses_dir)
            if name.endswith(".json")
        )

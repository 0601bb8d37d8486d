"""Application service — loads each course once and hands out its ProgressEngine."""
from __future__ import annotations
import logging
import threading
from typing import Dict, List

from masterygate.application.progress_engine import KeyedLocks, ProgressEngine
from masterygate.domain.common import codes
from masterygate.domain.common.result import Result
from masterygate.domain.graph.errors import CourseConfigurationError
from masterygate.persistence.interfaces.course_repository import CourseRepository
from masterygate.persistence.interfaces.progress_repository import ProgressRepository

logger = logging.getLogger(__name__)


class CourseAppService:
    def __init__(self, courses: CourseRepository, progress: ProgressRepository):
        self._courses = courses
        self._progress = progress
        self._engines: Dict[str, ProgressEngine] = {}
        self._lock = threading.Lock()
        self._progress_locks = KeyedLocks()

    def list_course_ids(self) -> List[str]:
        return self._courses.list_ids()

    def get_engine(self, course_id: str) -> Result[ProgressEngine]:
        """
        Return the course's engine, building its graph on first use.
        A course that fails to build is not cached, so a fixed definition is
        picked up on the next request.
        """
        with self._lock:
            engine = self._engines.get(course_id)
            if engine is not None:
                return Result.ok(engine)

            try:
                course = self._courses.get(course_id)
                if course is None:
                    return Result.fail(f"Course '{course_id}' not found.", code=codes.UNKNOWN_COURSE)
                engine = ProgressEngine.for_course(course, self._progress, locks=self._progress_locks)
            except CourseConfigurationError as e:
                logger.error("Course %s cannot be served: %s", course_id, e)
                return Result.fail(str(e), code=codes.COURSE_MISCONFIGURED)

            self._engines[course_id] = engine
            return Result.ok(engine)

    def reload(self, course_id: str) -> None:
        with self._lock:
            self._engines.pop(course_id, None)

"""Dependency injection container — wires implementations to interfaces."""
from __future__ import annotations
from functools import lru_cache

from masterygate.application.course_app_service import CourseAppService
from masterygate.core import config
from masterygate.persistence.repositories.jsonfile.json_course_repository import JsonCourseRepository
from masterygate.persistence.repositories.sqlite.sqlite_progress_repository import SqliteProgressRepository


@lru_cache(maxsize=1)
def get_progress_repo() -> SqliteProgressRepository:
    return SqliteProgressRepository(config.DATABASE_PATH)


@lru_cache(maxsize=1)
def get_course_repo() -> JsonCourseRepository:
    return JsonCourseRepository(config.COURSES_DIR)


@lru_cache(maxsize=1)
def get_course_app_service() -> CourseAppService:
    return CourseAppService(courses=get_course_repo(), progress=get_progress_repo())

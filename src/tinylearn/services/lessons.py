"""
Lesson catalogue
Lessons are deactivated rather than removed so progress rows keep their reference.
"""
from typing import Optional

from loguru import logger

from tinylearn.models.database_models import Lesson, LessonCategory, LessonDifficulty, User, UserRole
from tinylearn.models.repositories import LessonRepository
from tinylearn.services.errors import forbidden, not_found, validation
from tinylearn.utils.pagination import Page

AUTHOR_ROLES = (UserRole.TEACHER, UserRole.ADMIN)
UPDATABLE_FIELDS = (
    "title", "description", "content", "category", "difficulty", "age_group",
    "duration", "image_url", "video_url", "is_active",
)


class LessonService:
    def __init__(self, lessons: LessonRepository):
        self.lessons = lessons

    def list(self, page: int = 1, limit: int = 10, category: Optional[LessonCategory] = None,
             difficulty: Optional[LessonDifficulty] = None, age_group: Optional[str] = None) -> Page:
        return self.lessons.list_active(page, limit, category, difficulty, age_group)

    def get(self, lesson_id: int, caller: Optional[User] = None) -> Lesson:
        """Inactive lessons are only visible to their author and to admins."""
        lesson = self.lessons.get_by_id(lesson_id)
        if lesson is None or not (lesson.is_active or self._can_manage(caller, lesson)):
            raise not_found("Lesson not found")
        return lesson

    def create(self, caller: User, title: str, category: LessonCategory, age_group: str,
               difficulty: Optional[LessonDifficulty] = None, **fields) -> Lesson:
        if caller.role not in AUTHOR_ROLES:
            raise forbidden("Access denied. Teacher or admin role required.")
        if not title or not category or not age_group:
            raise validation("Title, category, and age group are required")

        return self.lessons.create(
            title=title,
            category=category,
            age_group=age_group,
            difficulty=difficulty or LessonDifficulty.BEGINNER,
            created_by=caller.id,
            **{k: v for k, v in fields.items() if k in UPDATABLE_FIELDS},
        )

    @staticmethod
    def _can_manage(caller: Optional[User], lesson: Lesson) -> bool:
        return caller is not None and (lesson.created_by == caller.id or caller.role == UserRole.ADMIN)

    def _check_owner(self, caller: User, lesson: Lesson) -> None:
        if not self._can_manage(caller, lesson):
            raise forbidden("Access denied")

    def update(self, caller: User, lesson_id: int, changes: dict) -> Lesson:
        lesson = self.get(lesson_id, caller)
        self._check_owner(caller, lesson)
        for key, value in changes.items():
            if key in UPDATABLE_FIELDS and value is not None:
                setattr(lesson, key, value)
        return self.lessons.save(lesson)

    def delete(self, caller: User, lesson_id: int) -> None:
        lesson = self.get(lesson_id, caller)
        self._check_owner(caller, lesson)
        lesson.is_active = False
        self.lessons.save(lesson)
        logger.info(f"Lesson deactivated: {lesson.id} by user {caller.id}")

"""
Lesson progress tracking and statistics
"""
from dataclasses import dataclass, asdict
from typing import List, Optional, Tuple

from loguru import logger
from sqlalchemy.exc import IntegrityError

from tinylearn.models.database_models import Progress, ProgressStatus, User, UserRole
from tinylearn.models.repositories import (
    LessonRepository, ProgressRepository, StudentParentRepository, UserRepository
)
from tinylearn.services.errors import (
    ErrorCode, ServiceError, forbidden, not_found, not_found_or_forbidden, validation
)
from tinylearn.utils.pagination import Page
from tinylearn.utils.timeutils import Clock, utcnow

MIN_SCORE = 0
MAX_SCORE = 100


@dataclass
class ProgressStats:
    total_lessons: int
    completed_lessons: int
    in_progress_lessons: int
    completion_rate: float
    average_score: float
    total_time_spent: int

    def to_dict(self) -> dict:
        return asdict(self)


def compute_stats(rows: List[Progress], total_lessons: int) -> ProgressStats:
    """Aggregate raw progress rows; nothing is cached between calls."""
    completed = [p for p in rows if p.status == ProgressStatus.COMPLETED]
    in_progress = [p for p in rows if p.status == ProgressStatus.IN_PROGRESS]
    scores = [p.score for p in completed if p.score is not None]

    completion_rate = round(len(completed) / total_lessons * 100, 2) if total_lessons > 0 else 0.0
    average_score = round(sum(scores) / len(scores), 2) if scores else 0.0

    return ProgressStats(
        total_lessons=total_lessons,
        completed_lessons=len(completed),
        in_progress_lessons=len(in_progress),
        completion_rate=completion_rate,
        average_score=average_score,
        total_time_spent=sum(p.time_spent or 0 for p in rows),
    )


class ProgressService:
    def __init__(self, progress: ProgressRepository, lessons: LessonRepository,
                 links: StudentParentRepository, users: UserRepository, clock: Clock = utcnow):
        self.progress = progress
        self.lessons = lessons
        self.links = links
        self.users = users
        self.clock = clock

    def _require(self, user: User, lesson_id: int) -> Progress:
        progress = self.progress.get(user.id, lesson_id)
        if progress is None:
            raise not_found("Progress not found for this lesson")
        return progress

    @staticmethod
    def _check_score(score: Optional[float]) -> None:
        if score is not None and not MIN_SCORE <= score <= MAX_SCORE:
            raise validation(f"Score must be between {MIN_SCORE} and {MAX_SCORE}")

    def start_lesson(self, user: User, lesson_id: int) -> Tuple[Progress, bool]:
        """
        Mark a lesson as started. Returns the progress row and whether it was created.
        """
        lesson = self.lessons.get_by_id(lesson_id)
        if lesson is None or not lesson.is_active:
            raise not_found("Lesson not found")

        progress = self.progress.get(user.id, lesson_id)
        if progress is None:
            try:
                progress = self.progress.insert(Progress(
                    user_id=user.id,
                    lesson_id=lesson_id,
                    status=ProgressStatus.IN_PROGRESS,
                    time_spent=0,
                ))
                logger.info(f"Lesson {lesson_id} started by user {user.id}")
                return progress, True
            except IntegrityError:
                self.progress.rollback()
                progress = self.progress.get(user.id, lesson_id)
                if progress is None:
                    raise

        if progress.status == ProgressStatus.NOT_STARTED:
            progress.status = ProgressStatus.IN_PROGRESS
            self.progress.save(progress)
        return progress, False

    def update_progress(self, user: User, lesson_id: int, status: Optional[ProgressStatus] = None,
                        score: Optional[float] = None, time_spent: Optional[int] = None,
                        notes: Optional[str] = None) -> Progress:
        progress = self._require(user, lesson_id)

        self._check_score(score)
        if time_spent is not None and time_spent < 0:
            raise validation("Time spent cannot be negative")
        if status is not None and status.rank < progress.status.rank:
            raise ServiceError(
                ErrorCode.INVALID_STATE,
                f"Progress cannot move from '{progress.status.value}' back to '{status.value}'",
            )

        if status is not None:
            progress.status = status
            if status == ProgressStatus.COMPLETED:
                progress.completed_at = self.clock()
        if score is not None:
            progress.score = score
        if time_spent is not None:
            progress.time_spent = (progress.time_spent or 0) + time_spent
        if notes:
            progress.notes = notes

        self.progress.save(progress)
        return progress

    def complete_lesson(self, user: User, lesson_id: int, score: Optional[float] = None,
                        notes: Optional[str] = None) -> Progress:
        progress = self._require(user, lesson_id)
        self._check_score(score)

        progress.status = ProgressStatus.COMPLETED
        progress.completed_at = self.clock()
        if score is not None:
            progress.score = score
        if notes:
            progress.notes = notes

        self.progress.save(progress)
        logger.info(f"Lesson {lesson_id} completed by user {user.id} (score={progress.score})")
        return progress

    # ---------- queries ----------

    def get_user_progress(self, user: User) -> List[Progress]:
        return self.progress.list_by_user(user.id)

    def get_lesson_progress(self, user: User, lesson_id: int) -> Progress:
        return self._require(user, lesson_id)

    def get_progress_stats(self, user: User) -> ProgressStats:
        return compute_stats(self.progress.list_by_user(user.id), self.lessons.count_active())

    def get_child_progress_stats(self, caller: User, student_id: int) -> ProgressStats:
        """
        Statistics for a student, as seen by a linked parent (or a teacher/admin).
        """
        if caller.role == UserRole.PARENT:
            link = self.links.get(student_id, caller.id)
            if link is None or not link.can_view_progress:
                raise not_found_or_forbidden("Student", "view progress for")
        elif caller.role not in (UserRole.TEACHER, UserRole.ADMIN):
            raise forbidden("Access denied")

        student = self.users.get_by_id(student_id)
        if student is None or student.role != UserRole.STUDENT:
            raise not_found_or_forbidden("Student", "view progress for")
        return self.get_progress_stats(student)

    def get_all_progress(self, caller: User, page: int = 1, limit: int = 10) -> Page:
        if caller.role not in (UserRole.ADMIN, UserRole.TEACHER):
            raise forbidden("Access denied. Admin or teacher role required.")
        return self.progress.list_all(page, limit)

"""
Shared dependencies for API routes
"""
from functools import lru_cache
from fastapi import Depends
from typing import Annotated
from sqlalchemy.orm import Session

from tinylearn.api.auth import get_current_active_user
from tinylearn.config import get_settings
from tinylearn.models.database import get_db
from tinylearn.models.database_models import User
from tinylearn.models.repositories import (
    AchievementRepository, AssignmentRepository, LessonRepository, MessageRepository,
    ProgressRepository, StudentParentRepository, SubmissionRepository, UserRepository
)
from tinylearn.services.assignments import AssignmentService
from tinylearn.services.lessons import LessonService
from tinylearn.services.messaging import MessagingService
from tinylearn.services.notifications import Notifier, NullNotifier, RedisNotifier
from tinylearn.services.progress import ProgressService
from tinylearn.services.submissions import SubmissionService
from tinylearn.services.users import UserService
from tinylearn.utils.timeutils import Clock, utcnow

# Dependency shortcuts
CurrentUser = Annotated[User, Depends(get_current_active_user)]
DBSession = Annotated[Session, Depends(get_db)]


def get_clock() -> Clock:
    return utcnow


@lru_cache(maxsize=1)
def get_notifier() -> Notifier:
    settings = get_settings()
    if settings.notifications_enabled:
        return RedisNotifier(url=settings.redis_url)
    return NullNotifier()


ClockDep = Annotated[Clock, Depends(get_clock)]
NotifierDep = Annotated[Notifier, Depends(get_notifier)]


def get_user_service(db: DBSession, clock: ClockDep) -> UserService:
    return UserService(UserRepository(db), StudentParentRepository(db), LessonRepository(db),
                       AchievementRepository(db), clock=clock)


def get_lesson_service(db: DBSession) -> LessonService:
    return LessonService(LessonRepository(db))


def get_assignment_service(db: DBSession, clock: ClockDep) -> AssignmentService:
    return AssignmentService(AssignmentRepository(db), SubmissionRepository(db), UserRepository(db),
                             LessonRepository(db), clock=clock)


def get_submission_service(db: DBSession, clock: ClockDep) -> SubmissionService:
    return SubmissionService(SubmissionRepository(db), AssignmentRepository(db), clock=clock)


def get_progress_service(db: DBSession, clock: ClockDep) -> ProgressService:
    return ProgressService(ProgressRepository(db), LessonRepository(db), StudentParentRepository(db),
                           UserRepository(db), clock=clock)


def get_messaging_service(db: DBSession, notifier: NotifierDep, clock: ClockDep) -> MessagingService:
    return MessagingService(MessageRepository(db), UserRepository(db), StudentParentRepository(db),
                            notifier=notifier, clock=clock)


Users = Annotated[UserService, Depends(get_user_service)]
Lessons = Annotated[LessonService, Depends(get_lesson_service)]
Assignments = Annotated[AssignmentService, Depends(get_assignment_service)]
Submissions = Annotated[SubmissionService, Depends(get_submission_service)]
ProgressTracker = Annotated[ProgressService, Depends(get_progress_service)]
Messaging = Annotated[MessagingService, Depends(get_messaging_service)]

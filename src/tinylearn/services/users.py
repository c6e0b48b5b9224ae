"""
User accounts, teacher approval and parent/student links
"""
from dataclasses import dataclass
from typing import Dict, List, Optional

from loguru import logger
from sqlalchemy.exc import IntegrityError

from tinylearn.models.database_models import (
    AccountStatus, ParentRelationship, StudentParent, User, UserRole
)
from tinylearn.models.repositories import (
    AchievementRepository, LessonRepository, StudentParentRepository, UserRepository
)
from tinylearn.services.errors import ErrorCode, ServiceError, forbidden, not_found, validation
from tinylearn.utils.timeutils import Clock, utcnow

PROFILE_FIELDS = ("first_name", "last_name", "age", "grade", "parent_email")


@dataclass
class SystemStats:
    users_by_role: Dict[str, int]
    pending_teachers: int
    active_lessons: int


def require_admin(caller: User) -> None:
    if caller.role != UserRole.ADMIN:
        raise forbidden("Access denied. Admin role required.")


class UserService:
    def __init__(self, users: UserRepository, links: StudentParentRepository,
                 lessons: LessonRepository, achievements: AchievementRepository,
                 clock: Clock = utcnow):
        self.users = users
        self.links = links
        self.lessons = lessons
        self.achievements = achievements
        self.clock = clock

    def register(self, first_name: str, last_name: str, email: str, hashed_password: str,
                 role: UserRole = UserRole.STUDENT, age: Optional[int] = None,
                 grade: Optional[str] = None, parent_email: Optional[str] = None) -> User:
        """
        Create an account. Teachers wait for admin approval; everyone else is approved at once.
        """
        email = email.strip().lower()
        if self.users.get_by_email(email):
            raise ServiceError(ErrorCode.CONFLICT, "User with this email already exists")

        status = AccountStatus.PENDING if role == UserRole.TEACHER else AccountStatus.APPROVED
        try:
            return self.users.create(
                first_name=first_name,
                last_name=last_name,
                email=email,
                hashed_password=hashed_password,
                role=role,
                account_status=status,
                age=age,
                grade=grade,
                parent_email=parent_email,
            )
        except IntegrityError:
            self.users.rollback()
            raise ServiceError(ErrorCode.CONFLICT, "User with this email already exists")

    def check_can_login(self, user: User) -> None:
        if not user.is_active:
            raise forbidden("Account is deactivated. Please contact support.")
        if user.account_status == AccountStatus.PENDING:
            raise forbidden("Account is awaiting administrator approval")
        if user.account_status == AccountStatus.SUSPENDED:
            raise forbidden("Account is suspended. Please contact support.")

    def record_login(self, user: User) -> User:
        user.last_login = self.clock()
        return self.users.save(user)

    def get_by_email(self, email: str) -> Optional[User]:
        return self.users.get_by_email(email.strip().lower())

    def get(self, user_id: int) -> User:
        user = self.users.get_by_id(user_id)
        if user is None:
            raise not_found("User not found")
        return user

    def update_profile(self, user: User, changes: dict) -> User:
        for key in PROFILE_FIELDS:
            value = changes.get(key)
            if value is not None:
                setattr(user, key, value)
        return self.users.save(user)

    # ---------- administration ----------

    def list_users(self, caller: User, role: Optional[UserRole] = None) -> List[User]:
        require_admin(caller)
        return self.users.list_users(role=role)

    def set_account_status(self, caller: User, user_id: int, status: AccountStatus) -> User:
        require_admin(caller)
        user = self.get(user_id)
        if user.id == caller.id:
            raise validation("Administrators cannot change their own account status")
        user.account_status = status
        self.users.save(user)
        logger.info(f"Account status of user {user.id} set to {status.value} by admin {caller.id}")
        return user

    def deactivate(self, caller: User, user_id: int) -> User:
        require_admin(caller)
        user = self.get(user_id)
        if user.id == caller.id:
            raise validation("Administrators cannot deactivate themselves")
        user.is_active = False
        self.users.save(user)
        logger.info(f"User {user.id} deactivated by admin {caller.id}")
        return user

    def system_stats(self, caller: User) -> SystemStats:
        require_admin(caller)
        return SystemStats(
            users_by_role=self.users.count_by_role(),
            pending_teachers=self.users.count_by_status(AccountStatus.PENDING),
            active_lessons=self.lessons.count_active(),
        )

    # ---------- parents ----------

    def link_parent(self, caller: User, parent_id: int, student_id: int,
                    relationship: ParentRelationship = ParentRelationship.GUARDIAN,
                    is_primary: bool = False, can_receive_messages: bool = True,
                    can_view_progress: bool = True) -> StudentParent:
        require_admin(caller)
        parent = self.get(parent_id)
        student = self.get(student_id)
        if parent.role != UserRole.PARENT:
            raise validation("Linked parent must have the parent role")
        if student.role != UserRole.STUDENT:
            raise validation("Linked student must have the student role")
        if self.links.get(student.id, parent.id):
            raise ServiceError(ErrorCode.CONFLICT, "Parent is already linked to this student")

        try:
            return self.links.create(
                student_id=student.id,
                parent_id=parent.id,
                relationship_type=relationship,
                is_primary=is_primary,
                can_receive_messages=can_receive_messages,
                can_view_progress=can_view_progress,
            )
        except IntegrityError:
            self.links.rollback()
            raise ServiceError(ErrorCode.CONFLICT, "Parent is already linked to this student")

    def list_children(self, caller: User) -> List[StudentParent]:
        if caller.role != UserRole.PARENT:
            raise forbidden("Only parents can view their children")
        return self.links.list_by_parent(caller.id)

    def list_achievements(self, caller: User):
        return self.achievements.list_by_user(caller.id)

    def achievement_points(self, caller: User) -> int:
        return self.achievements.total_points(caller.id)

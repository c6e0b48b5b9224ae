"""
Assignment lifecycle
Creation with due-date validation, role-filtered listings, owner-only updates
and soft deletion.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, List, Optional

from loguru import logger

from tinylearn.models.database_models import (
    Assignment, AssignmentType, Submission, SubmissionStatus, User, UserRole
)
from tinylearn.models.repositories import (
    AssignmentRepository, LessonRepository, SubmissionRepository, UserRepository
)
from tinylearn.services.errors import (
    ErrorCode, ServiceError, forbidden, not_found, not_found_or_forbidden, validation
)
from tinylearn.utils.pagination import Page
from tinylearn.utils.timeutils import Clock, days_until, to_naive_utc, utcnow

MIN_POINTS = 1
MAX_POINTS = 1000

TEACHER_STATUS_FILTERS = {"all": None, "active": True, "inactive": False}
STUDENT_STATUS_FILTERS = ("all", "pending", "submitted", "graded", "overdue")

UPDATABLE_FIELDS = (
    "title", "description", "instructions", "lesson_id", "due_date",
    "max_points", "assignment_type", "attachments", "is_active",
)


@dataclass
class SubmissionStats:
    total: int
    submitted: int
    graded: int
    pending: int


@dataclass
class TeacherAssignmentView:
    assignment: Assignment
    stats: SubmissionStats


@dataclass
class StudentAssignmentView:
    assignment: Assignment
    submission: Optional[Submission]
    is_overdue: bool
    days_until_due: int

    @property
    def submission_status(self) -> Optional[SubmissionStatus]:
        return self.submission.status if self.submission else None


def is_overdue(assignment: Assignment, submission: Optional[Submission], now: datetime) -> bool:
    return assignment.due_date < now and (
        submission is None or submission.status == SubmissionStatus.DRAFT
    )


def submission_stats(assignment: Assignment) -> SubmissionStats:
    statuses = [s.status for s in assignment.submissions]
    return SubmissionStats(
        total=len(assignment.assignees),
        submitted=sum(1 for s in statuses if s in (SubmissionStatus.SUBMITTED, SubmissionStatus.GRADED)),
        graded=sum(1 for s in statuses if s == SubmissionStatus.GRADED),
        pending=sum(1 for s in statuses if s == SubmissionStatus.SUBMITTED),
    )


class AssignmentService:
    def __init__(self, assignments: AssignmentRepository, submissions: SubmissionRepository,
                 users: UserRepository, lessons: LessonRepository, clock: Clock = utcnow):
        self.assignments = assignments
        self.submissions = submissions
        self.users = users
        self.lessons = lessons
        self.clock = clock

    # ---------- validation helpers ----------

    def _check_due_date(self, due_date: datetime) -> datetime:
        due_date = to_naive_utc(due_date)
        if due_date <= self.clock():
            raise ServiceError(ErrorCode.INVALID_DUE_DATE, "Due date must be in the future")
        return due_date

    def _check_max_points(self, max_points: int) -> int:
        if max_points is None or not MIN_POINTS <= max_points <= MAX_POINTS:
            raise validation(f"Max points must be between {MIN_POINTS} and {MAX_POINTS}")
        return max_points

    def _check_students(self, student_ids: Iterable[int]) -> List[int]:
        ids = sorted(set(student_ids or []))
        if not ids:
            raise validation("Assignment must be assigned to at least one student")
        found = {u.id: u for u in self.users.get_many(ids)}
        invalid = [sid for sid in ids if sid not in found or found[sid].role != UserRole.STUDENT]
        if invalid:
            raise validation("Assigned users must be existing students", details={"invalid_ids": invalid})
        return ids

    def _check_lesson(self, lesson_id: Optional[int]) -> None:
        if lesson_id is not None and self.lessons.get_by_id(lesson_id) is None:
            raise not_found("Lesson not found")

    # ---------- commands ----------

    def create(self, caller: User, title: str, description: str, assigned_to: Iterable[int],
               due_date: datetime, max_points: int = 100, instructions: Optional[str] = None,
               lesson_id: Optional[int] = None, assignment_type: AssignmentType = AssignmentType.HOMEWORK,
               attachments: Optional[List[str]] = None) -> Assignment:
        if caller.role != UserRole.TEACHER:
            raise forbidden("Only teachers can create assignments")

        due_date = self._check_due_date(due_date)
        max_points = self._check_max_points(max_points)
        student_ids = self._check_students(assigned_to)
        self._check_lesson(lesson_id)

        return self.assignments.create(
            assigned_to=student_ids,
            title=title,
            description=description,
            instructions=instructions,
            lesson_id=lesson_id,
            teacher_id=caller.id,
            due_date=due_date,
            max_points=max_points,
            assignment_type=assignment_type or AssignmentType.HOMEWORK,
            attachments=list(attachments or []),
        )

    def update(self, caller: User, assignment_id: int, changes: dict) -> Assignment:
        assignment = self.assignments.get_owned(assignment_id, caller.id)
        if assignment is None or caller.role != UserRole.TEACHER:
            raise not_found_or_forbidden("Assignment", "edit")

        if "due_date" in changes and changes["due_date"] is not None:
            changes["due_date"] = self._check_due_date(changes["due_date"])
        if "max_points" in changes and changes["max_points"] is not None:
            self._check_max_points(changes["max_points"])
            highest = self.submissions.max_score(assignment.id)
            if highest is not None and changes["max_points"] < highest:
                raise validation(f"Max points cannot be lower than an existing score ({highest:g})")
        if "lesson_id" in changes:
            self._check_lesson(changes["lesson_id"])

        assigned_to = changes.pop("assigned_to", None)
        if assigned_to is not None:
            self.assignments.replace_assignees(assignment, self._check_students(assigned_to))

        for key, value in changes.items():
            if key in UPDATABLE_FIELDS and value is not None:
                setattr(assignment, key, value)

        self.assignments.save(assignment)
        logger.info(f"Assignment updated: {assignment.id} by teacher {caller.id}")
        return assignment

    def delete(self, caller: User, assignment_id: int) -> None:
        assignment = self.assignments.get_owned(assignment_id, caller.id)
        if assignment is None or caller.role != UserRole.TEACHER:
            raise not_found_or_forbidden("Assignment", "delete")
        assignment.is_active = False
        self.assignments.save(assignment)
        logger.info(f"Assignment deactivated: {assignment.id} by teacher {caller.id}")

    # ---------- queries ----------

    def list_for(self, caller: User, page: int = 1, limit: int = 10, status: str = "all") -> Page:
        if caller.role == UserRole.TEACHER:
            return self.list_for_teacher(caller, page, limit, status)
        if caller.role == UserRole.STUDENT:
            return self.list_for_student(caller, page, limit, status)
        if caller.role == UserRole.ADMIN:
            return self.assignments.list_all(page, limit)
        raise forbidden("Access denied")

    def list_for_teacher(self, caller: User, page: int = 1, limit: int = 10, status: str = "all") -> Page:
        if caller.role != UserRole.TEACHER:
            raise forbidden("Only teachers can view their assignments")
        if status not in TEACHER_STATUS_FILTERS:
            raise validation(f"Unknown status filter: {status}")

        result = self.assignments.list_by_teacher(caller.id, page, limit, TEACHER_STATUS_FILTERS[status])
        result.items = [TeacherAssignmentView(a, submission_stats(a)) for a in result.items]
        return result

    def list_for_student(self, caller: User, page: int = 1, limit: int = 10, status: str = "all") -> Page:
        if caller.role != UserRole.STUDENT:
            raise forbidden("Only students can view assigned work")
        if status not in STUDENT_STATUS_FILTERS:
            raise validation(f"Unknown status filter: {status}")

        now = self.clock()
        result = self.assignments.list_for_student(caller.id, page, limit)
        own = self.submissions.by_assignment_for_student(caller.id, [a.id for a in result.items])

        views = []
        for assignment in result.items:
            submission = own.get(assignment.id)
            views.append(StudentAssignmentView(
                assignment=assignment,
                submission=submission,
                is_overdue=is_overdue(assignment, submission, now),
                days_until_due=days_until(assignment.due_date, now),
            ))

        # Status filtering applies to the current page only; total reflects the unfiltered count
        if status == "pending":
            views = [v for v in views if v.submission_status in (None, SubmissionStatus.DRAFT)]
        elif status == "submitted":
            views = [v for v in views if v.submission_status == SubmissionStatus.SUBMITTED]
        elif status == "graded":
            views = [v for v in views if v.submission_status == SubmissionStatus.GRADED]
        elif status == "overdue":
            views = [v for v in views if v.is_overdue]

        result.items = views
        return result

    def get(self, caller: User, assignment_id: int) -> Assignment:
        assignment = self.assignments.get_by_id(assignment_id)
        if assignment is None:
            raise not_found("Assignment not found")

        if caller.role == UserRole.ADMIN:
            return assignment
        if caller.role == UserRole.STUDENT and assignment.is_assigned(caller.id):
            return assignment
        if caller.role == UserRole.TEACHER and assignment.teacher_id == caller.id:
            return assignment
        raise forbidden("You do not have permission to view this assignment")

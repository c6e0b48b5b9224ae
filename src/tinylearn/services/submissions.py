"""
Submission state machine

    (none) --create_or_update--> draft --submit--> submitted --grade--> graded

graded and returned are final: no student edit, submit or re-grade is accepted.
"""
from typing import List, Optional

from loguru import logger
from sqlalchemy.exc import IntegrityError

from tinylearn.models.database_models import Submission, SubmissionStatus, User, UserRole
from tinylearn.models.repositories import AssignmentRepository, SubmissionRepository
from tinylearn.services.errors import (
    ErrorCode, ServiceError, forbidden, not_found, not_found_or_forbidden, validation
)
from tinylearn.utils.pagination import Page
from tinylearn.utils.timeutils import Clock, utcnow


def already_graded() -> ServiceError:
    return ServiceError(ErrorCode.ALREADY_GRADED, "Submission has already been graded and can no longer change")


class SubmissionService:
    def __init__(self, submissions: SubmissionRepository, assignments: AssignmentRepository,
                 clock: Clock = utcnow):
        self.submissions = submissions
        self.assignments = assignments
        self.clock = clock

    def create_or_update(self, caller: User, assignment_id: int, content: Optional[str],
                         attachments: Optional[List[str]] = None,
                         time_spent: Optional[int] = None) -> Submission:
        """
        Create the caller's draft for an assignment, or overwrite an existing draft.
        """
        if caller.role != UserRole.STUDENT:
            raise forbidden("Only students can submit assignments")

        assignment = self.assignments.get_by_id(assignment_id)
        if assignment is None:
            raise not_found("Assignment not found")
        if not assignment.is_assigned(caller.id):
            raise forbidden("You are not assigned to this assignment")

        submission = self.submissions.get_for(assignment_id, caller.id)
        if submission is not None and submission.status.is_final:
            raise already_graded()
        if not assignment.is_active:
            raise ServiceError(ErrorCode.INVALID_STATE, "Assignment is no longer active")
        if time_spent is not None and time_spent < 0:
            raise validation("Time spent cannot be negative")

        if submission is None:
            try:
                submission = self.submissions.insert(Submission(
                    assignment_id=assignment_id,
                    student_id=caller.id,
                    content=content,
                    attachments=list(attachments or []),
                    status=SubmissionStatus.DRAFT,
                    time_spent=time_spent or 0,
                ))
                logger.info(f"Submission draft created: {submission.id} "
                            f"(assignment {assignment_id}, student {caller.id})")
                return submission
            except IntegrityError:
                # A concurrent request created the row first; continue as an update
                self.submissions.rollback()
                submission = self.submissions.get_for(assignment_id, caller.id)
                if submission is None:
                    raise

        return self._update_draft(submission, content, attachments, time_spent)

    def _update_draft(self, submission: Submission, content: Optional[str],
                      attachments: Optional[List[str]], time_spent: Optional[int]) -> Submission:
        if submission.status.is_final:
            raise already_graded()
        if submission.status != SubmissionStatus.DRAFT:
            raise ServiceError(ErrorCode.INVALID_STATE, "Submission has been submitted and is awaiting grading")

        submission.content = content
        if attachments is not None:
            submission.attachments = list(attachments)
        if time_spent is not None:
            submission.time_spent = time_spent
        self.submissions.save(submission)
        logger.info(f"Submission draft updated: {submission.id}")
        return submission

    def submit(self, caller: User, submission_id: int) -> Submission:
        submission = self.submissions.get_by_id(submission_id)
        if submission is None or submission.student_id != caller.id:
            raise not_found_or_forbidden("Submission", "submit")
        if submission.status.is_final:
            raise already_graded()
        if submission.status != SubmissionStatus.DRAFT:
            raise ServiceError(ErrorCode.INVALID_STATE, "Only draft submissions can be submitted")

        now = self.clock()
        if now > submission.assignment.due_date:
            raise ServiceError(ErrorCode.PAST_DUE, "The due date for this assignment has passed")

        submission.status = SubmissionStatus.SUBMITTED
        submission.submitted_at = now
        self.submissions.save(submission)
        logger.info(f"Submission submitted: {submission.id} by student {caller.id}")
        return submission

    def grade(self, caller: User, submission_id: int, score: float,
              feedback: Optional[str] = None) -> Submission:
        if caller.role != UserRole.TEACHER:
            raise forbidden("Only teachers can grade submissions")

        submission = self.submissions.get_by_id(submission_id)
        if submission is None:
            raise not_found("Submission not found")

        assignment = submission.assignment
        if assignment.teacher_id != caller.id:
            raise forbidden("You can only grade submissions for your assignments")
        if submission.status.is_final:
            raise already_graded()
        if submission.status != SubmissionStatus.SUBMITTED:
            raise ServiceError(ErrorCode.INVALID_STATE,
                               f"Cannot grade a submission in '{submission.status.value}' state")
        if score is None or not 0 <= score <= assignment.max_points:
            raise ServiceError(ErrorCode.SCORE_OUT_OF_RANGE,
                               f"Score must be between 0 and {assignment.max_points}")

        submission.score = score
        submission.feedback = feedback
        submission.status = SubmissionStatus.GRADED
        submission.graded_at = self.clock()
        submission.graded_by = caller.id
        self.submissions.save(submission)
        logger.info(f"Submission graded: {submission.id} score={score}/{assignment.max_points} "
                    f"by teacher {caller.id}")
        return submission

    # ---------- queries ----------

    def list_for_student(self, caller: User, page: int = 1, limit: int = 10,
                         status: Optional[SubmissionStatus] = None,
                         assignment_id: Optional[int] = None) -> Page:
        if caller.role != UserRole.STUDENT:
            raise forbidden("Only students can view their submissions")
        return self.submissions.list_by_student(caller.id, page, limit, status, assignment_id)

    def list_for_assignment(self, caller: User, assignment_id: int, page: int = 1, limit: int = 10,
                            status: Optional[SubmissionStatus] = None) -> Page:
        assignment = self.assignments.get_by_id(assignment_id)
        allowed = assignment is not None and (
            caller.role == UserRole.ADMIN
            or (caller.role == UserRole.TEACHER and assignment.teacher_id == caller.id)
        )
        if not allowed:
            raise not_found_or_forbidden("Assignment", "view submissions for")
        return self.submissions.list_by_assignment(assignment_id, page, limit, status)

    def get(self, caller: User, submission_id: int) -> Submission:
        submission = self.submissions.get_by_id(submission_id)
        if submission is None:
            raise not_found("Submission not found")

        can_view = (
            (caller.role == UserRole.STUDENT and submission.student_id == caller.id)
            or (caller.role == UserRole.TEACHER and submission.assignment.teacher_id == caller.id)
            or caller.role == UserRole.ADMIN
        )
        if not can_view:
            raise forbidden("You do not have permission to view this submission")
        return submission

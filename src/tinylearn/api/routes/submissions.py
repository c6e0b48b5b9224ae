"""
Submission routes
Draft save, submit, grade and the student/teacher listings
"""
from typing import Optional
from fastapi import APIRouter

from tinylearn.api.dependencies import CurrentUser, Submissions
from tinylearn.api.responses import page_payload, success_response
from tinylearn.api.schemas import GradeRequest, SubmissionUpsert
from tinylearn.api.serializers import submission_to_dict
from tinylearn.models.database_models import SubmissionStatus

router = APIRouter(prefix="/api/submissions", tags=["Submissions"])


@router.post("")
async def save_submission(payload: SubmissionUpsert, current_user: CurrentUser, service: Submissions):
    """Create or update the current student's draft"""
    submission = service.create_or_update(
        current_user,
        payload.assignment_id,
        payload.content,
        attachments=payload.attachments,
        time_spent=payload.time_spent,
    )
    return success_response({"submission": submission_to_dict(submission)},
                            "Submission saved successfully")


@router.patch("/{submission_id}/submit")
async def submit_submission(submission_id: int, current_user: CurrentUser, service: Submissions):
    submission = service.submit(current_user, submission_id)
    return success_response({"submission": submission_to_dict(submission)},
                            "Submission submitted successfully")


@router.patch("/{submission_id}/grade")
async def grade_submission(submission_id: int, payload: GradeRequest,
                           current_user: CurrentUser, service: Submissions):
    submission = service.grade(current_user, submission_id, payload.score, payload.feedback)
    return success_response({"submission": submission_to_dict(submission)},
                            "Submission graded successfully")


@router.get("/student")
async def list_student_submissions(current_user: CurrentUser, service: Submissions,
                                   page: int = 1, limit: int = 10,
                                   status: Optional[SubmissionStatus] = None,
                                   assignment_id: Optional[int] = None):
    result = service.list_for_student(current_user, page, limit, status, assignment_id)
    return success_response(page_payload(result, "submissions", submission_to_dict),
                            "Submissions retrieved successfully")


@router.get("/assignment/{assignment_id}")
async def list_assignment_submissions(assignment_id: int, current_user: CurrentUser, service: Submissions,
                                      page: int = 1, limit: int = 10,
                                      status: Optional[SubmissionStatus] = None):
    """All submissions for one of the current teacher's assignments"""
    result = service.list_for_assignment(current_user, assignment_id, page, limit, status)
    return success_response(page_payload(result, "submissions", submission_to_dict),
                            "Submissions retrieved successfully")


@router.get("/{submission_id}")
async def get_submission(submission_id: int, current_user: CurrentUser, service: Submissions):
    submission = service.get(current_user, submission_id)
    return success_response({"submission": submission_to_dict(submission)},
                            "Submission retrieved successfully")

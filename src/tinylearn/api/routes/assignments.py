"""
Assignment routes
Creation, role-filtered listings, detail, update and soft delete
"""
from fastapi import APIRouter

from tinylearn.api.dependencies import Assignments, CurrentUser
from tinylearn.api.responses import page_payload, success_response
from tinylearn.api.schemas import AssignmentCreate, AssignmentUpdate
from tinylearn.api.serializers import (
    assignment_to_dict, student_assignment_to_dict, teacher_assignment_to_dict
)
from tinylearn.services.assignments import StudentAssignmentView, TeacherAssignmentView

router = APIRouter(prefix="/api/assignments", tags=["Assignments"])


def _listing_item(item) -> dict:
    if isinstance(item, TeacherAssignmentView):
        return teacher_assignment_to_dict(item)
    if isinstance(item, StudentAssignmentView):
        return student_assignment_to_dict(item)
    return assignment_to_dict(item)


@router.post("")
async def create_assignment(payload: AssignmentCreate, current_user: CurrentUser, service: Assignments):
    """Create an assignment for a set of students"""
    assignment = service.create(current_user, **payload.model_dump())
    return success_response({"assignment": assignment_to_dict(assignment)},
                            "Assignment created successfully", status_code=201)


@router.get("")
async def list_assignments(current_user: CurrentUser, service: Assignments,
                           page: int = 1, limit: int = 10, status: str = "all"):
    """List assignments visible to the current user"""
    result = service.list_for(current_user, page, limit, status)
    return success_response(page_payload(result, "assignments", _listing_item),
                            "Assignments retrieved successfully")


@router.get("/teacher")
async def list_teacher_assignments(current_user: CurrentUser, service: Assignments,
                                   page: int = 1, limit: int = 10, status: str = "all"):
    """Assignments created by the current teacher, with submission statistics"""
    result = service.list_for_teacher(current_user, page, limit, status)
    return success_response(page_payload(result, "assignments", teacher_assignment_to_dict),
                            "Assignments retrieved successfully")


@router.get("/student")
async def list_student_assignments(current_user: CurrentUser, service: Assignments,
                                   page: int = 1, limit: int = 10, status: str = "all"):
    """Assignments assigned to the current student, with their own submission"""
    result = service.list_for_student(current_user, page, limit, status)
    return success_response(page_payload(result, "assignments", student_assignment_to_dict),
                            "Assignments retrieved successfully")


@router.get("/{assignment_id}")
async def get_assignment(assignment_id: int, current_user: CurrentUser, service: Assignments):
    assignment = service.get(current_user, assignment_id)
    return success_response({"assignment": assignment_to_dict(assignment)},
                            "Assignment retrieved successfully")


@router.put("/{assignment_id}")
async def update_assignment(assignment_id: int, payload: AssignmentUpdate,
                            current_user: CurrentUser, service: Assignments):
    """Update an assignment owned by the current teacher"""
    assignment = service.update(current_user, assignment_id, payload.model_dump(exclude_unset=True))
    return success_response({"assignment": assignment_to_dict(assignment)},
                            "Assignment updated successfully")


@router.delete("/{assignment_id}")
async def delete_assignment(assignment_id: int, current_user: CurrentUser, service: Assignments):
    """Deactivate an assignment owned by the current teacher"""
    service.delete(current_user, assignment_id)
    return success_response(None, "Assignment deleted successfully")

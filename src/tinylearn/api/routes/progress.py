"""
Progress routes
Per-lesson progress for the current user and aggregated statistics
"""
from typing import Optional
from fastapi import APIRouter

from tinylearn.api.dependencies import CurrentUser, ProgressTracker
from tinylearn.api.responses import page_payload, success_response
from tinylearn.api.schemas import CompleteRequest, ProgressUpdate
from tinylearn.api.serializers import progress_to_dict

router = APIRouter(prefix="/api/progress", tags=["Progress"])


@router.get("")
async def get_user_progress(current_user: CurrentUser, service: ProgressTracker):
    rows = service.get_user_progress(current_user)
    return success_response({"progress": [progress_to_dict(p) for p in rows]},
                            "Progress retrieved successfully")


@router.get("/stats")
async def get_progress_stats(current_user: CurrentUser, service: ProgressTracker):
    stats = service.get_progress_stats(current_user)
    return success_response({"stats": stats.to_dict()}, "Progress statistics retrieved successfully")


@router.get("/all")
async def get_all_progress(current_user: CurrentUser, service: ProgressTracker,
                           page: int = 1, limit: int = 10):
    """Progress of every user (admin and teacher only)"""
    result = service.get_all_progress(current_user, page, limit)
    return success_response(page_payload(result, "progress", progress_to_dict),
                            "Progress retrieved successfully")


@router.get("/student/{student_id}/stats")
async def get_student_progress_stats(student_id: int, current_user: CurrentUser, service: ProgressTracker):
    """Statistics for a student, as seen by a linked parent, a teacher or an admin"""
    stats = service.get_child_progress_stats(current_user, student_id)
    return success_response({"student_id": student_id, "stats": stats.to_dict()},
                            "Progress statistics retrieved successfully")


@router.get("/lesson/{lesson_id}")
async def get_lesson_progress(lesson_id: int, current_user: CurrentUser, service: ProgressTracker):
    progress = service.get_lesson_progress(current_user, lesson_id)
    return success_response({"progress": progress_to_dict(progress)}, "Progress retrieved successfully")


@router.post("/lesson/{lesson_id}/start")
async def start_lesson(lesson_id: int, current_user: CurrentUser, service: ProgressTracker):
    progress, created = service.start_lesson(current_user, lesson_id)
    return success_response({"progress": progress_to_dict(progress)},
                            "Lesson started successfully" if created else "Lesson already started",
                            status_code=201 if created else 200)


@router.put("/lesson/{lesson_id}")
async def update_progress(lesson_id: int, payload: ProgressUpdate,
                          current_user: CurrentUser, service: ProgressTracker):
    progress = service.update_progress(
        current_user,
        lesson_id,
        status=payload.status,
        score=payload.score,
        time_spent=payload.time_spent,
        notes=payload.notes,
    )
    return success_response({"progress": progress_to_dict(progress)}, "Progress updated successfully")


@router.put("/lesson/{lesson_id}/complete")
async def complete_lesson(lesson_id: int, current_user: CurrentUser, service: ProgressTracker,
                          payload: Optional[CompleteRequest] = None):
    payload = payload or CompleteRequest()
    progress = service.complete_lesson(current_user, lesson_id, score=payload.score, notes=payload.notes)
    return success_response({"progress": progress_to_dict(progress)}, "Lesson completed successfully")

"""
Lesson routes
Public catalogue plus teacher/admin authoring
"""
from typing import Optional
from fastapi import APIRouter

from tinylearn.api.dependencies import CurrentUser, Lessons
from tinylearn.api.responses import page_payload, success_response
from tinylearn.api.schemas import LessonCreate, LessonUpdate
from tinylearn.api.serializers import lesson_to_dict
from tinylearn.models.database_models import LessonCategory, LessonDifficulty

router = APIRouter(prefix="/api/lessons", tags=["Lessons"])


@router.get("")
async def get_lessons(service: Lessons, page: int = 1, limit: int = 10,
                      category: Optional[LessonCategory] = None,
                      difficulty: Optional[LessonDifficulty] = None,
                      age_group: Optional[str] = None):
    """Get active lessons"""
    result = service.list(page, limit, category, difficulty, age_group)
    return success_response(page_payload(result, "lessons", lesson_to_dict),
                            "Lessons retrieved successfully")


@router.get("/{lesson_id}")
async def get_lesson(lesson_id: int, service: Lessons):
    lesson = service.get(lesson_id)
    return success_response({"lesson": lesson_to_dict(lesson)}, "Lesson retrieved successfully")


@router.post("")
async def create_lesson(payload: LessonCreate, current_user: CurrentUser, service: Lessons):
    lesson = service.create(current_user, **payload.model_dump())
    return success_response({"lesson": lesson_to_dict(lesson)}, "Lesson created successfully",
                            status_code=201)


@router.put("/{lesson_id}")
async def update_lesson(lesson_id: int, payload: LessonUpdate, current_user: CurrentUser, service: Lessons):
    lesson = service.update(current_user, lesson_id, payload.model_dump(exclude_unset=True))
    return success_response({"lesson": lesson_to_dict(lesson)}, "Lesson updated successfully")


@router.delete("/{lesson_id}")
async def delete_lesson(lesson_id: int, current_user: CurrentUser, service: Lessons):
    """Deactivate a lesson"""
    service.delete(current_user, lesson_id)
    return success_response(None, "Lesson deleted successfully")

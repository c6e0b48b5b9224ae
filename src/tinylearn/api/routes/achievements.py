"""
Achievement routes
"""
from fastapi import APIRouter

from tinylearn.api.dependencies import CurrentUser, Users
from tinylearn.api.responses import success_response
from tinylearn.api.serializers import achievement_to_dict

router = APIRouter(prefix="/api/achievements", tags=["Achievements"])


@router.get("")
async def get_achievements(current_user: CurrentUser, service: Users):
    achievements = service.list_achievements(current_user)
    return success_response({
        "achievements": [achievement_to_dict(a) for a in achievements],
        "total_points": service.achievement_points(current_user),
    }, "Achievements retrieved successfully")

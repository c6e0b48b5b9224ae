"""
User routes
Registration, login, profile and account administration
"""
from typing import Optional
from fastapi import APIRouter

from tinylearn.api.auth import LoginRequest, RegisterRequest, login_for_access_token, register_user
from tinylearn.api.dependencies import CurrentUser, Users
from tinylearn.api.responses import success_response
from tinylearn.api.schemas import AccountStatusUpdate, ParentLinkRequest, ProfileUpdate
from tinylearn.api.serializers import link_to_dict, user_to_dict
from tinylearn.models.database_models import AccountStatus, UserRole

router = APIRouter(prefix="/api/users", tags=["Users"])


@router.post("/register")
async def register(register_data: RegisterRequest, service: Users):
    """Register a new user"""
    user = register_user(service, register_data)
    message = "User registered successfully"
    if user.account_status == AccountStatus.PENDING:
        message = "Registration received. Your account is awaiting administrator approval."
    return success_response({"user": user_to_dict(user)}, message, status_code=201)


@router.post("/login")
async def login(login_data: LoginRequest, service: Users):
    """Login endpoint"""
    token, user = login_for_access_token(service, login_data)
    return success_response({
        "access_token": token.access_token,
        "token_type": token.token_type,
        "user": user_to_dict(user),
    }, "Login successful")


@router.get("/profile")
async def get_profile(current_user: CurrentUser):
    return success_response({"user": user_to_dict(current_user)}, "Profile retrieved successfully")


@router.put("/profile")
async def update_profile(payload: ProfileUpdate, current_user: CurrentUser, service: Users):
    user = service.update_profile(current_user, payload.model_dump(exclude_unset=True))
    return success_response({"user": user_to_dict(user)}, "Profile updated successfully")


@router.get("")
async def list_users(current_user: CurrentUser, service: Users, role: Optional[UserRole] = None):
    """List users (admin only)"""
    users = service.list_users(current_user, role)
    return success_response({"users": [user_to_dict(u) for u in users]}, "Users retrieved successfully")


@router.get("/stats")
async def get_system_stats(current_user: CurrentUser, service: Users):
    stats = service.system_stats(current_user)
    return success_response({
        "users_by_role": stats.users_by_role,
        "pending_teachers": stats.pending_teachers,
        "active_lessons": stats.active_lessons,
    }, "Statistics retrieved successfully")


@router.patch("/{user_id}/status")
async def set_account_status(user_id: int, payload: AccountStatusUpdate,
                             current_user: CurrentUser, service: Users):
    """Approve or suspend an account (admin only)"""
    user = service.set_account_status(current_user, user_id, payload.account_status)
    return success_response({"user": user_to_dict(user)}, "Account status updated successfully")


@router.delete("/{user_id}")
async def deactivate_user(user_id: int, current_user: CurrentUser, service: Users):
    """Deactivate a user (admin only)"""
    user = service.deactivate(current_user, user_id)
    return success_response({"user": user_to_dict(user)}, "User deactivated successfully")


@router.post("/parent-student-link")
async def link_parent(payload: ParentLinkRequest, current_user: CurrentUser, service: Users):
    link = service.link_parent(
        current_user,
        payload.parent_id,
        payload.student_id,
        relationship=payload.relationship,
        is_primary=payload.is_primary,
        can_receive_messages=payload.can_receive_messages,
        can_view_progress=payload.can_view_progress,
    )
    return success_response({"link": link_to_dict(link)}, "Parent linked successfully", status_code=201)


@router.get("/parent/children")
async def list_children(current_user: CurrentUser, service: Users):
    links = service.list_children(current_user)
    return success_response({"children": [link_to_dict(l) for l in links]},
                            "Children retrieved successfully")

from fastapi import APIRouter, Depends
from typing import List, Optional
from app.schemas.user import (
    UserCreateRequest,
    UserResponse,
    UserRegisterResponse,
    RoleResponse,
    RoleUpdateRequest,
)
from app.schemas.moderation import FraudCascadeResponse
from app.services.user_service import get_or_create_user, get_all_users, resolve_role, set_user_role
from app.services.moderation_service import mark_fraudulent
from app.utils.dependencies import get_current_admin_email, get_path_matched_email

router = APIRouter(prefix="/users", tags=["Users"])


@router.post("", response_model=UserRegisterResponse)
async def register_user(request: UserCreateRequest):
    """Register a user if not already present (safe to call on every sign-in)"""
    user, created = await get_or_create_user(
        email=request.email,
        name=request.name,
        photo_url=request.photo_url,
    )
    return UserRegisterResponse(
        message="User created" if created else "User already exists",
        created=created,
        user=UserResponse(**user),
    )


@router.get("", response_model=List[UserResponse])
async def list_users(
    role: Optional[str] = None,
    admin_email: str = Depends(get_current_admin_email)
):
    """Get all users (Admin only)"""
    users = await get_all_users(role=role)
    return [UserResponse(**u) for u in users]


@router.get("/role/{email}", response_model=RoleResponse)
async def get_user_role(caller_email: str = Depends(get_path_matched_email)):
    """Get the caller's own stored role"""
    role = await resolve_role(caller_email)
    return RoleResponse(role=role)


@router.patch("/role/{user_id}", response_model=UserResponse)
async def update_user_role(
    user_id: str,
    request: RoleUpdateRequest,
    admin_email: str = Depends(get_current_admin_email)
):
    """Assign a role to a user (Admin only). Takes effect on the user's next request."""
    user = await set_user_role(user_id, request.role)
    return UserResponse(**user)


@router.patch("/fraud/{user_id}", response_model=FraudCascadeResponse)
async def mark_user_fraudulent(
    user_id: str,
    admin_email: str = Depends(get_current_admin_email)
):
    """
    Mark a user as fraudulent (Admin only).
    WARNING: permanently deletes every listing the user owns, including verified and sold ones.
    """
    result = await mark_fraudulent(user_id)
    return FraudCascadeResponse(**result)

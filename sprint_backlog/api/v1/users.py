from fastapi import APIRouter, Depends
from typing import List
from uuid import UUID

from ...core.auth import get_current_user
from ...core.constants import DEFAULT_ACTIVITY_LIMIT
from ...models.user import User
from ...schemas import ProfileUpdate, UserActivitiesResponse, UserResponse
from ...services.user_service import UserService
from ..deps import get_user_service

router = APIRouter()


@router.get("", response_model=List[UserResponse])
async def list_users(
    service: UserService = Depends(get_user_service),
    current_user: User = Depends(get_current_user)
):
    return await service.get_all()


# Declared before "/{user_id}" so "profile" is not parsed as an id
@router.put("/profile", response_model=UserResponse)
async def update_profile(
    request: ProfileUpdate,
    service: UserService = Depends(get_user_service),
    current_user: User = Depends(get_current_user)
):
    return await service.update_profile(current_user.id, request)


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: UUID,
    service: UserService = Depends(get_user_service),
    current_user: User = Depends(get_current_user)
):
    return await service.get_by_id(user_id)


@router.get("/{user_id}/activities", response_model=UserActivitiesResponse)
async def get_user_activities(
    user_id: UUID,
    limit: int = DEFAULT_ACTIVITY_LIMIT,
    service: UserService = Depends(get_user_service),
    current_user: User = Depends(get_current_user)
):
    """Merged item and sprint history for a user, newest first"""
    if limit <= 0:
        limit = DEFAULT_ACTIVITY_LIMIT
    return await service.get_activities(user_id, limit)

from fastapi import APIRouter, Depends

from ...core.auth import get_current_user
from ...models.user import User
from ...schemas import AuthResponse, GoogleVerifyRequest, UserResponse
from ...services.auth_service import AuthService
from ..deps import get_auth_service

router = APIRouter()


@router.post("/google/verify", response_model=AuthResponse)
async def verify_google_code(
    request: GoogleVerifyRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Exchange a Google authorization code for a session token"""
    return await service.verify_google_code(request.code, request.redirect_uri)


@router.get("/me", response_model=UserResponse)
async def get_me(current_user: User = Depends(get_current_user)):
    return current_user

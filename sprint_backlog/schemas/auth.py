"""Auth schemas."""
from typing import Optional

from pydantic import BaseModel, Field

from .user import UserResponse


class GoogleVerifyRequest(BaseModel):
    code: str = Field(min_length=1)
    redirect_uri: Optional[str] = None


class AuthResponse(BaseModel):
    token: str
    expires_in: int
    user: UserResponse

"""User schemas."""
from datetime import datetime
from typing import Any, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from .common import ItemSummary, SprintSummary


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    email: str
    avatar_url: Optional[str] = None
    created_at: Optional[datetime] = None


class ProfileUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    avatar_url: Optional[str] = None


class UserActivity(BaseModel):
    """One entry of the merged item/sprint timeline."""
    id: UUID
    type: str
    action: str
    timestamp: datetime
    field_changed: Optional[str] = None
    old_value: Any = None
    new_value: Any = None
    comment: Optional[str] = None
    item: Optional[ItemSummary] = None
    sprint: Optional[SprintSummary] = None


class UserActivitiesResponse(BaseModel):
    activities: List[UserActivity]
    total: int
    limit: int

"""Sprint schemas."""
from datetime import date, datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from .backlog import BacklogItemResponse
from .common import UserSummary


class SprintCreate(BaseModel):
    project_id: UUID
    name: str = Field(min_length=1, max_length=100)
    goal: Optional[str] = None
    start_date: date
    end_date: date


class SprintUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    goal: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class AddItemRequest(BaseModel):
    item_id: UUID


class SprintResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    project_id: UUID
    name: str
    goal: Optional[str] = None
    start_date: date
    end_date: date
    status: str
    velocity: Optional[int] = None
    created_by_id: UUID
    creator: Optional[UserSummary] = None
    created_at: datetime
    updated_at: datetime


class SprintWithItemsResponse(SprintResponse):
    items: List[BacklogItemResponse] = Field(default_factory=list)
    total_items: int = 0
    total_points: int = 0


class SprintListResponse(BaseModel):
    sprints: List[SprintResponse]
    total: int
    page: int
    limit: int
    total_pages: int


class SprintReport(BaseModel):
    sprint: SprintResponse
    total_items: int
    completed_items: int
    total_story_points: int
    completed_story_points: int
    completion_percentage: float
    velocity: int

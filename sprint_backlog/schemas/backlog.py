"""Backlog item schemas.

Enumerated fields are accepted as plain strings; the service validates
them so that unknown values surface as typed validation errors.
"""
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from .common import SprintSummary, UserSummary


class BacklogItemCreate(BaseModel):
    project_id: UUID
    title: str = Field(min_length=1, max_length=200)
    description: Optional[str] = None
    type: str
    priority: str
    status: Optional[str] = None
    story_points: Optional[int] = Field(default=None, ge=0, le=100)
    labels: List[str] = Field(default_factory=list)


class BacklogItemUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    type: Optional[str] = None
    priority: Optional[str] = None
    status: Optional[str] = None
    story_points: Optional[int] = Field(default=None, ge=0, le=100)
    labels: Optional[List[str]] = None


class StatusUpdate(BaseModel):
    status: str


class PriorityUpdate(BaseModel):
    priority: str


class LabelRequest(BaseModel):
    label: str = Field(max_length=50)


class CommentRequest(BaseModel):
    content: str = Field(max_length=2000)


class BacklogItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    project_id: UUID
    sprint_id: Optional[UUID] = None
    title: str
    description: Optional[str] = None
    type: str
    priority: str
    status: str
    story_points: Optional[int] = None
    labels: List[str] = Field(default_factory=list)
    position: int
    created_by_id: UUID
    creator: Optional[UserSummary] = None
    sprint: Optional[SprintSummary] = None
    created_at: datetime
    updated_at: datetime


class BacklogListResponse(BaseModel):
    items: List[BacklogItemResponse]
    total: int
    page: int
    limit: int
    total_pages: int

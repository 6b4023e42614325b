"""Pydantic schemas."""
from .common import ItemSummary, SprintSummary, UserSummary, total_pages
from .user import ProfileUpdate, UserActivitiesResponse, UserActivity, UserResponse
from .project import ProjectCreate, ProjectListResponse, ProjectResponse, ProjectUpdate
from .backlog import (
    BacklogItemCreate,
    BacklogItemResponse,
    BacklogItemUpdate,
    BacklogListResponse,
    CommentRequest,
    LabelRequest,
    PriorityUpdate,
    StatusUpdate,
)
from .sprint import (
    AddItemRequest,
    SprintCreate,
    SprintListResponse,
    SprintReport,
    SprintResponse,
    SprintUpdate,
    SprintWithItemsResponse,
)
from .history import ItemHistoryResponse, SprintHistoryResponse
from .auth import AuthResponse, GoogleVerifyRequest

__all__ = [
    "ItemSummary",
    "SprintSummary",
    "UserSummary",
    "total_pages",
    "ProfileUpdate",
    "UserActivitiesResponse",
    "UserActivity",
    "UserResponse",
    "ProjectCreate",
    "ProjectListResponse",
    "ProjectResponse",
    "ProjectUpdate",
    "BacklogItemCreate",
    "BacklogItemResponse",
    "BacklogItemUpdate",
    "BacklogListResponse",
    "CommentRequest",
    "LabelRequest",
    "PriorityUpdate",
    "StatusUpdate",
    "AddItemRequest",
    "SprintCreate",
    "SprintListResponse",
    "SprintReport",
    "SprintResponse",
    "SprintUpdate",
    "SprintWithItemsResponse",
    "ItemHistoryResponse",
    "SprintHistoryResponse",
    "AuthResponse",
    "GoogleVerifyRequest",
]

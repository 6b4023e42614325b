from fastapi import APIRouter, Depends, Query, status
from typing import List, Optional
from uuid import UUID

from ...core.auth import get_current_user
from ...models.user import User
from ...repositories import BacklogFilters
from ...schemas import (
    BacklogItemCreate,
    BacklogItemResponse,
    BacklogItemUpdate,
    BacklogListResponse,
    CommentRequest,
    ItemHistoryResponse,
    LabelRequest,
    PriorityUpdate,
    StatusUpdate,
    total_pages,
)
from ...services.backlog_service import BacklogService, parse_sprint_filter
from ...services.history_service import HistoryService
from ..deps import get_backlog_service

router = APIRouter()


@router.post("", response_model=BacklogItemResponse, status_code=status.HTTP_201_CREATED)
async def create_backlog_item(
    request: BacklogItemCreate,
    service: BacklogService = Depends(get_backlog_service),
    current_user: User = Depends(get_current_user)
):
    """Create a backlog item at the end of its project's backlog"""
    return await service.create(request, current_user.id)


@router.get("", response_model=BacklogListResponse)
async def list_backlog_items(
    project_id: Optional[UUID] = None,
    search: Optional[str] = None,
    type: Optional[List[str]] = Query(None),
    priority: Optional[List[str]] = Query(None),
    status: Optional[List[str]] = Query(None),
    sprint_id: Optional[str] = Query(None, description="Sprint id, or 'none' for unassigned items"),
    labels: Optional[List[str]] = Query(None),
    page: int = 1,
    limit: int = 10,
    service: BacklogService = Depends(get_backlog_service),
    current_user: User = Depends(get_current_user)
):
    """List backlog items with filters and pagination"""

    sprint_uuid, unassigned_only = parse_sprint_filter(sprint_id)
    filters = BacklogFilters(
        search=search.strip() if search else None,
        types=type or [],
        priorities=priority or [],
        statuses=status or [],
        sprint_id=sprint_uuid,
        unassigned_only=unassigned_only,
        labels=labels or [],
        project_id=project_id,
        page=page,
        limit=limit,
    )

    items, total = await service.get_all(filters)

    return BacklogListResponse(
        items=[BacklogItemResponse.model_validate(item) for item in items],
        total=total,
        page=filters.page,
        limit=filters.limit,
        total_pages=total_pages(total, filters.limit),
    )


@router.get("/{item_id}", response_model=BacklogItemResponse)
async def get_backlog_item(
    item_id: UUID,
    service: BacklogService = Depends(get_backlog_service),
    current_user: User = Depends(get_current_user)
):
    return await service.get_by_id(item_id)


@router.put("/{item_id}", response_model=BacklogItemResponse)
async def update_backlog_item(
    item_id: UUID,
    request: BacklogItemUpdate,
    service: BacklogService = Depends(get_backlog_service),
    current_user: User = Depends(get_current_user)
):
    """Update item fields; each changed field lands in the item history"""
    return await service.update(item_id, request, current_user.id)


@router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_backlog_item(
    item_id: UUID,
    service: BacklogService = Depends(get_backlog_service),
    current_user: User = Depends(get_current_user)
):
    await service.delete(item_id, current_user.id)


@router.patch("/{item_id}/status", response_model=BacklogItemResponse)
async def update_item_status(
    item_id: UUID,
    request: StatusUpdate,
    service: BacklogService = Depends(get_backlog_service),
    current_user: User = Depends(get_current_user)
):
    return await service.update_status(item_id, request.status, current_user.id)


@router.patch("/{item_id}/priority", response_model=BacklogItemResponse)
async def update_item_priority(
    item_id: UUID,
    request: PriorityUpdate,
    service: BacklogService = Depends(get_backlog_service),
    current_user: User = Depends(get_current_user)
):
    return await service.update_priority(item_id, request.priority, current_user.id)


@router.post(
    "/{item_id}/comments",
    response_model=ItemHistoryResponse,
    status_code=status.HTTP_201_CREATED
)
async def add_item_comment(
    item_id: UUID,
    request: CommentRequest,
    service: BacklogService = Depends(get_backlog_service),
    current_user: User = Depends(get_current_user)
):
    entry = await service.add_comment(item_id, request.content, current_user.id)
    return HistoryService.to_item_response(entry)


@router.post("/{item_id}/labels", response_model=BacklogItemResponse)
async def add_item_label(
    item_id: UUID,
    request: LabelRequest,
    service: BacklogService = Depends(get_backlog_service),
    current_user: User = Depends(get_current_user)
):
    return await service.add_label(item_id, request.label, current_user.id)


@router.delete("/{item_id}/labels/{label}", response_model=BacklogItemResponse)
async def remove_item_label(
    item_id: UUID,
    label: str,
    service: BacklogService = Depends(get_backlog_service),
    current_user: User = Depends(get_current_user)
):
    return await service.remove_label(item_id, label, current_user.id)


@router.get("/{item_id}/history", response_model=List[ItemHistoryResponse])
async def get_item_history(
    item_id: UUID,
    service: BacklogService = Depends(get_backlog_service),
    current_user: User = Depends(get_current_user)
):
    """Item ledger, newest first"""
    return await service.get_history(item_id)

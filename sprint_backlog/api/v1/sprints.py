from fastapi import APIRouter, Depends, Query, status
from typing import List, Optional
from uuid import UUID

from ...core.auth import get_current_user
from ...models.user import User
from ...repositories import SprintFilters
from ...schemas import (
    AddItemRequest,
    BacklogItemResponse,
    SprintCreate,
    SprintHistoryResponse,
    SprintListResponse,
    SprintReport,
    SprintResponse,
    SprintUpdate,
    SprintWithItemsResponse,
    total_pages,
)
from ...services.sprint_service import SprintService
from ..deps import get_sprint_service

router = APIRouter()


@router.post("", response_model=SprintResponse, status_code=status.HTTP_201_CREATED)
async def create_sprint(
    request: SprintCreate,
    service: SprintService = Depends(get_sprint_service),
    current_user: User = Depends(get_current_user)
):
    """Create a sprint in Planning status"""
    return await service.create(request, current_user.id)


@router.get("", response_model=SprintListResponse)
async def list_sprints(
    project_id: Optional[UUID] = None,
    status: Optional[List[str]] = Query(None),
    page: int = 1,
    limit: int = 10,
    service: SprintService = Depends(get_sprint_service),
    current_user: User = Depends(get_current_user)
):
    filters = SprintFilters(
        project_id=project_id,
        statuses=status or [],
        page=page,
        limit=limit,
    )
    sprints, total = await service.get_all(filters)

    return SprintListResponse(
        sprints=[SprintResponse.model_validate(sprint) for sprint in sprints],
        total=total,
        page=filters.page,
        limit=filters.limit,
        total_pages=total_pages(total, filters.limit),
    )


# Declared before "/{sprint_id}" so "active" is not parsed as an id
@router.get("/active", response_model=SprintResponse)
async def get_active_sprint(
    project_id: UUID,
    service: SprintService = Depends(get_sprint_service),
    current_user: User = Depends(get_current_user)
):
    return await service.get_active(project_id)


@router.get("/{sprint_id}", response_model=SprintResponse)
async def get_sprint(
    sprint_id: UUID,
    service: SprintService = Depends(get_sprint_service),
    current_user: User = Depends(get_current_user)
):
    return await service.get_by_id(sprint_id)


@router.put("/{sprint_id}", response_model=SprintResponse)
async def update_sprint(
    sprint_id: UUID,
    request: SprintUpdate,
    service: SprintService = Depends(get_sprint_service),
    current_user: User = Depends(get_current_user)
):
    return await service.update(sprint_id, request, current_user.id)


@router.delete("/{sprint_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_sprint(
    sprint_id: UUID,
    service: SprintService = Depends(get_sprint_service),
    current_user: User = Depends(get_current_user)
):
    await service.delete(sprint_id, current_user.id)


@router.get("/{sprint_id}/items", response_model=SprintWithItemsResponse)
async def get_sprint_with_items(
    sprint_id: UUID,
    service: SprintService = Depends(get_sprint_service),
    current_user: User = Depends(get_current_user)
):
    return await service.get_with_items(sprint_id)


@router.post("/{sprint_id}/start", response_model=SprintResponse)
async def start_sprint(
    sprint_id: UUID,
    service: SprintService = Depends(get_sprint_service),
    current_user: User = Depends(get_current_user)
):
    """Planning -> Active; only one active sprint per project"""
    return await service.start(sprint_id, current_user.id)


@router.post("/{sprint_id}/complete", response_model=SprintResponse)
async def complete_sprint(
    sprint_id: UUID,
    service: SprintService = Depends(get_sprint_service),
    current_user: User = Depends(get_current_user)
):
    """Active -> Completed; freezes velocity"""
    return await service.complete(sprint_id, current_user.id)


@router.post("/{sprint_id}/cancel", response_model=SprintResponse)
async def cancel_sprint(
    sprint_id: UUID,
    service: SprintService = Depends(get_sprint_service),
    current_user: User = Depends(get_current_user)
):
    return await service.cancel(sprint_id, current_user.id)


@router.post("/{sprint_id}/items", response_model=BacklogItemResponse)
async def add_item_to_sprint(
    sprint_id: UUID,
    request: AddItemRequest,
    service: SprintService = Depends(get_sprint_service),
    current_user: User = Depends(get_current_user)
):
    return await service.add_item(sprint_id, request.item_id, current_user.id)


@router.delete("/{sprint_id}/items/{item_id}", response_model=BacklogItemResponse)
async def remove_item_from_sprint(
    sprint_id: UUID,
    item_id: UUID,
    service: SprintService = Depends(get_sprint_service),
    current_user: User = Depends(get_current_user)
):
    return await service.remove_item(sprint_id, item_id, current_user.id)


@router.get("/{sprint_id}/history", response_model=List[SprintHistoryResponse])
async def get_sprint_history(
    sprint_id: UUID,
    service: SprintService = Depends(get_sprint_service),
    current_user: User = Depends(get_current_user)
):
    return await service.get_history(sprint_id)


@router.get("/{sprint_id}/report", response_model=SprintReport)
async def get_sprint_report(
    sprint_id: UUID,
    service: SprintService = Depends(get_sprint_service),
    current_user: User = Depends(get_current_user)
):
    return await service.get_report(sprint_id)

from fastapi import APIRouter, Depends, status
from uuid import UUID

from ...core.auth import get_current_user
from ...models.user import User
from ...schemas import (
    ProjectCreate,
    ProjectListResponse,
    ProjectResponse,
    ProjectUpdate,
    total_pages,
)
from ...services.project_service import ProjectService
from ..deps import get_project_service

router = APIRouter()


@router.post("", response_model=ProjectResponse, status_code=status.HTTP_201_CREATED)
async def create_project(
    request: ProjectCreate,
    service: ProjectService = Depends(get_project_service),
    current_user: User = Depends(get_current_user)
):
    return await service.create(request, current_user.id)


@router.get("", response_model=ProjectListResponse)
async def list_projects(
    page: int = 1,
    limit: int = 10,
    service: ProjectService = Depends(get_project_service),
    current_user: User = Depends(get_current_user)
):
    projects, total, page, limit = await service.get_all(page, limit)

    return ProjectListResponse(
        projects=[ProjectResponse.model_validate(project) for project in projects],
        total=total,
        page=page,
        limit=limit,
        total_pages=total_pages(total, limit),
    )


@router.get("/{project_id}", response_model=ProjectResponse)
async def get_project(
    project_id: UUID,
    service: ProjectService = Depends(get_project_service),
    current_user: User = Depends(get_current_user)
):
    return await service.get_by_id(project_id)


@router.put("/{project_id}", response_model=ProjectResponse)
async def update_project(
    project_id: UUID,
    request: ProjectUpdate,
    service: ProjectService = Depends(get_project_service),
    current_user: User = Depends(get_current_user)
):
    return await service.update(project_id, request)


@router.delete("/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_project(
    project_id: UUID,
    service: ProjectService = Depends(get_project_service),
    current_user: User = Depends(get_current_user)
):
    """Delete a project along with its sprints and backlog"""
    await service.delete(project_id)

import re
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import (
    InvalidProjectKeyError,
    ProjectKeyExistsError,
    ProjectNotFoundError,
    ValidationFailedError,
)
from ..models import Project
from ..repositories import ProjectRepository, SqlProjectRepository
from ..schemas import ProjectCreate, ProjectUpdate
from .base import TransactionalService, normalize_page

PROJECT_KEY_PATTERN = re.compile(r"^[A-Z0-9]{2,10}$")


class ProjectService(TransactionalService):
    """Project CRUD. Keys are stored upper-case and are unique."""

    def __init__(self, db: AsyncSession, projects: Optional[ProjectRepository] = None) -> None:
        super().__init__(db)
        self.projects = projects or SqlProjectRepository(db)

    async def create(self, data: ProjectCreate, user_id: UUID) -> Project:
        key = data.key.strip().upper()
        if not PROJECT_KEY_PATTERN.match(key):
            raise InvalidProjectKeyError(key)

        name = data.name.strip()
        if not name:
            raise ValidationFailedError("Project name cannot be empty")

        async with self._unit_of_work(
            "Create project",
            on_integrity_error=lambda e: ProjectKeyExistsError(key)
        ):
            if await self.projects.get_by_key(key) is not None:
                raise ProjectKeyExistsError(key)

            project = Project(
                name=name,
                key=key,
                description=data.description,
                created_by_id=user_id,
            )
            await self.projects.create(project)

        self._logger.info("Created project %s (%s)", project.id, key)
        return await self.get_by_id(project.id)

    async def get_by_id(self, project_id: UUID) -> Project:
        project = await self.projects.get_by_id(project_id)
        if project is None:
            raise ProjectNotFoundError(project_id)
        return project

    async def get_by_key(self, key: str) -> Project:
        project = await self.projects.get_by_key(key.strip().upper())
        if project is None:
            raise ProjectNotFoundError(key)
        return project

    async def get_all(self, page: int, limit: int) -> Tuple[List[Project], int, int, int]:
        page, limit = normalize_page(page, limit)
        projects, total = await self.projects.get_page(page, limit)
        return projects, total, page, limit

    async def update(self, project_id: UUID, data: ProjectUpdate) -> Project:
        changes = data.model_dump(exclude_unset=True)
        if "name" in changes:
            if changes["name"] is None or not changes["name"].strip():
                raise ValidationFailedError("Project name cannot be empty")
            changes["name"] = changes["name"].strip()

        async with self._unit_of_work("Update project"):
            project = await self.get_by_id(project_id)
            for field, value in changes.items():
                setattr(project, field, value)
            await self.projects.update(project)

        self._logger.info("Updated project %s", project_id)
        return await self.get_by_id(project_id)

    async def delete(self, project_id: UUID) -> None:
        async with self._unit_of_work("Delete project"):
            project = await self.get_by_id(project_id)
            await self.projects.delete(project)

        self._logger.info("Deleted project %s", project_id)

from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..models import Project
from .base import ProjectRepository
from .pagination import count_rows, paginate


class SqlProjectRepository(ProjectRepository):

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def create(self, project: Project) -> Project:
        self.db.add(project)
        await self.db.flush()
        return project

    async def get_by_id(self, project_id: UUID) -> Optional[Project]:
        stmt = (
            select(Project)
            .options(selectinload(Project.creator))
            .where(Project.id == project_id)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_key(self, key: str) -> Optional[Project]:
        stmt = (
            select(Project)
            .options(selectinload(Project.creator))
            .where(Project.key == key)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_page(self, page: int, limit: int) -> Tuple[List[Project], int]:
        stmt = select(Project)
        total = await count_rows(self.db, stmt)

        stmt = paginate(stmt.order_by(desc(Project.created_at)), page, limit)
        result = await self.db.execute(stmt.options(selectinload(Project.creator)))
        return list(result.scalars().all()), total

    async def update(self, project: Project) -> Project:
        self.db.add(project)
        await self.db.flush()
        return project

    async def delete(self, project: Project) -> None:
        await self.db.delete(project)
        await self.db.flush()

from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy import desc, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..models import BacklogItem, Sprint
from ..models.base import utcnow
from ..core.constants import ItemStatus, SprintStatus
from .base import SprintFilters, SprintRepository
from .pagination import count_rows, paginate


class SqlSprintRepository(SprintRepository):
    """SQLAlchemy-backed sprint store."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def create(self, sprint: Sprint) -> Sprint:
        self.db.add(sprint)
        await self.db.flush()
        return sprint

    async def get_by_id(self, sprint_id: UUID) -> Optional[Sprint]:
        stmt = (
            select(Sprint)
            .options(selectinload(Sprint.creator), selectinload(Sprint.project))
            .where(Sprint.id == sprint_id)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_all(self, filters: SprintFilters) -> Tuple[List[Sprint], int]:
        stmt = select(Sprint)

        if filters.project_id is not None:
            stmt = stmt.where(Sprint.project_id == filters.project_id)

        if filters.statuses:
            stmt = stmt.where(Sprint.status.in_(filters.statuses))

        total = await count_rows(self.db, stmt)

        stmt = paginate(stmt.order_by(desc(Sprint.start_date)), filters.page, filters.limit)
        stmt = stmt.options(selectinload(Sprint.creator), selectinload(Sprint.project))

        result = await self.db.execute(stmt)
        return list(result.scalars().all()), total

    async def get_active(self, project_id: UUID) -> Optional[Sprint]:
        stmt = (
            select(Sprint)
            .options(selectinload(Sprint.creator), selectinload(Sprint.project))
            .where(
                Sprint.project_id == project_id,
                Sprint.status == SprintStatus.ACTIVE.value
            )
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        return result.scalars().first()

    async def update(self, sprint: Sprint) -> Sprint:
        self.db.add(sprint)
        await self.db.flush()
        return sprint

    async def delete(self, sprint: Sprint) -> None:
        await self.db.delete(sprint)
        await self.db.flush()

    async def update_status(self, sprint_id: UUID, status: str) -> None:
        await self.db.execute(
            update(Sprint)
            .where(Sprint.id == sprint_id)
            .values(status=status, updated_at=utcnow())
        )

    async def calculate_velocity(self, sprint_id: UUID) -> int:
        stmt = select(func.coalesce(func.sum(BacklogItem.story_points), 0)).where(
            BacklogItem.sprint_id == sprint_id,
            BacklogItem.status == ItemStatus.DONE.value
        )
        result = await self.db.execute(stmt)
        return int(result.scalar() or 0)

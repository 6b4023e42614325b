import json
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy import String, cast, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..models import BacklogItem
from ..models.base import utcnow
from .base import BacklogFilters, BacklogRepository
from .pagination import count_rows, paginate


class SqlBacklogRepository(BacklogRepository):
    """SQLAlchemy-backed backlog item store."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def create(self, item: BacklogItem) -> BacklogItem:
        self.db.add(item)
        await self.db.flush()
        return item

    async def get_by_id(self, item_id: UUID, for_update: bool = False) -> Optional[BacklogItem]:
        stmt = (
            select(BacklogItem)
            .options(
                selectinload(BacklogItem.creator),
                selectinload(BacklogItem.sprint),
            )
            .where(BacklogItem.id == item_id)
            .execution_options(populate_existing=True)
        )
        if for_update:
            stmt = stmt.with_for_update()

        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_all(self, filters: BacklogFilters) -> Tuple[List[BacklogItem], int]:
        stmt = self._apply_filters(select(BacklogItem), filters)
        total = await count_rows(self.db, stmt)

        if filters.project_id is not None:
            stmt = stmt.order_by(BacklogItem.position.asc(), BacklogItem.created_at.desc())
        else:
            stmt = stmt.order_by(BacklogItem.created_at.desc())

        stmt = paginate(stmt, filters.page, filters.limit).options(
            selectinload(BacklogItem.creator),
            selectinload(BacklogItem.sprint),
        )

        result = await self.db.execute(stmt)
        return list(result.scalars().all()), total

    async def get_by_sprint_id(self, sprint_id: UUID) -> List[BacklogItem]:
        stmt = (
            select(BacklogItem)
            .options(selectinload(BacklogItem.creator), selectinload(BacklogItem.sprint))
            .where(BacklogItem.sprint_id == sprint_id)
            .order_by(BacklogItem.position.asc())
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def update(self, item: BacklogItem) -> BacklogItem:
        self.db.add(item)
        await self.db.flush()
        return item

    async def delete(self, item: BacklogItem) -> None:
        await self.db.delete(item)
        await self.db.flush()

    async def update_status(self, item_id: UUID, status: str) -> None:
        await self.db.execute(
            update(BacklogItem)
            .where(BacklogItem.id == item_id)
            .values(status=status, updated_at=utcnow())
        )

    async def update_priority(self, item_id: UUID, priority: str) -> None:
        await self.db.execute(
            update(BacklogItem)
            .where(BacklogItem.id == item_id)
            .values(priority=priority, updated_at=utcnow())
        )

    async def add_label(self, item_id: UUID, label: str) -> bool:
        item = await self.get_by_id(item_id, for_update=True)
        if item is None:
            return False

        labels = list(item.labels or [])
        if label in labels:
            return False

        item.labels = labels + [label]
        await self.db.flush()
        return True

    async def remove_label(self, item_id: UUID, label: str) -> bool:
        item = await self.get_by_id(item_id, for_update=True)
        if item is None:
            return False

        labels = list(item.labels or [])
        if label not in labels:
            return False

        item.labels = [existing for existing in labels if existing != label]
        await self.db.flush()
        return True

    async def get_max_position(self, project_id: UUID) -> int:
        stmt = select(func.coalesce(func.max(BacklogItem.position), 0)).where(
            BacklogItem.project_id == project_id
        )
        result = await self.db.execute(stmt)
        return int(result.scalar() or 0)

    def _apply_filters(self, stmt, filters: BacklogFilters):
        if filters.project_id is not None:
            stmt = stmt.where(BacklogItem.project_id == filters.project_id)

        if filters.search:
            pattern = f"%{filters.search}%"
            stmt = stmt.where(
                or_(
                    BacklogItem.title.ilike(pattern),
                    BacklogItem.description.ilike(pattern)
                )
            )

        if filters.types:
            stmt = stmt.where(BacklogItem.type.in_(filters.types))

        if filters.priorities:
            stmt = stmt.where(BacklogItem.priority.in_(filters.priorities))

        if filters.statuses:
            stmt = stmt.where(BacklogItem.status.in_(filters.statuses))

        if filters.unassigned_only:
            stmt = stmt.where(BacklogItem.sprint_id.is_(None))
        elif filters.sprint_id is not None:
            stmt = stmt.where(BacklogItem.sprint_id == filters.sprint_id)

        if filters.labels:
            # Any-match against the serialized JSON array
            labels_text = cast(BacklogItem.labels, String)
            stmt = stmt.where(
                or_(*[
                    labels_text.contains(json.dumps(label), autoescape=True)
                    for label in filters.labels
                ])
            )

        return stmt

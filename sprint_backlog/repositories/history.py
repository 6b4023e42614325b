from typing import List
from uuid import UUID

from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..models import ItemHistory, SprintHistory
from .base import ItemHistoryRepository, SprintHistoryRepository


class SqlItemHistoryRepository(ItemHistoryRepository):
    """Item ledger. Rows are only ever inserted."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def create(self, entry: ItemHistory) -> ItemHistory:
        self.db.add(entry)
        await self.db.flush()
        return entry

    async def get_by_item_id(self, item_id: UUID) -> List[ItemHistory]:
        stmt = (
            select(ItemHistory)
            .options(selectinload(ItemHistory.user))
            .where(ItemHistory.item_id == item_id)
            .order_by(desc(ItemHistory.timestamp))
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def get_by_user_id(self, user_id: UUID, limit: int = 0) -> List[ItemHistory]:
        stmt = (
            select(ItemHistory)
            .options(selectinload(ItemHistory.item), selectinload(ItemHistory.user))
            .where(ItemHistory.user_id == user_id)
            .order_by(desc(ItemHistory.timestamp))
        )
        if limit > 0:
            stmt = stmt.limit(limit)

        result = await self.db.execute(stmt)
        return list(result.scalars().all())


class SqlSprintHistoryRepository(SprintHistoryRepository):
    """Sprint ledger. Rows are only ever inserted."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def create(self, entry: SprintHistory) -> SprintHistory:
        self.db.add(entry)
        await self.db.flush()
        return entry

    async def get_by_sprint_id(self, sprint_id: UUID) -> List[SprintHistory]:
        stmt = (
            select(SprintHistory)
            .options(selectinload(SprintHistory.user), selectinload(SprintHistory.item))
            .where(SprintHistory.sprint_id == sprint_id)
            .order_by(desc(SprintHistory.timestamp))
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def get_by_user_id(self, user_id: UUID, limit: int = 0) -> List[SprintHistory]:
        stmt = (
            select(SprintHistory)
            .options(
                selectinload(SprintHistory.sprint),
                selectinload(SprintHistory.item),
                selectinload(SprintHistory.user),
            )
            .where(SprintHistory.user_id == user_id)
            .order_by(desc(SprintHistory.timestamp))
        )
        if limit > 0:
            stmt = stmt.limit(limit)

        result = await self.db.execute(stmt)
        return list(result.scalars().all())

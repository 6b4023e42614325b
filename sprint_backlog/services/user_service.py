from typing import List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import UserNotFoundError, ValidationFailedError
from ..models import User
from ..repositories import SqlUserRepository, UserRepository
from ..schemas import ProfileUpdate, UserActivitiesResponse
from .activity_service import ActivityService
from .base import TransactionalService
from .history_service import HistoryService


class UserService(TransactionalService):

    def __init__(
        self,
        db: AsyncSession,
        users: Optional[UserRepository] = None,
        activity: Optional[ActivityService] = None
    ) -> None:
        super().__init__(db)
        self.users = users or SqlUserRepository(db)
        self.activity = activity or ActivityService(HistoryService(db))

    async def get_all(self) -> List[User]:
        return await self.users.get_all()

    async def get_by_id(self, user_id: UUID) -> User:
        user = await self.users.get_by_id(user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        return user

    async def update_profile(self, user_id: UUID, data: ProfileUpdate) -> User:
        changes = data.model_dump(exclude_unset=True)
        if "name" in changes:
            if changes["name"] is None or not changes["name"].strip():
                raise ValidationFailedError("Name cannot be empty")
            changes["name"] = changes["name"].strip()

        async with self._unit_of_work("Update profile"):
            user = await self.get_by_id(user_id)
            for field, value in changes.items():
                setattr(user, field, value)
            await self.users.update(user)

        self._logger.info("Updated profile for user %s", user_id)
        return user

    async def get_activities(self, user_id: UUID, limit: int = 0) -> UserActivitiesResponse:
        await self.get_by_id(user_id)
        return await self.activity.get_activities(user_id, limit)

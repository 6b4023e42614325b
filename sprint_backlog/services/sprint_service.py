"""
Sprint state machine.

    Planning -> Active -> Completed
    Planning -> Cancelled
    Active   -> Cancelled

At most one sprint per project is Active. The check below gives the usual
error; the partial unique index on ``sprints`` catches concurrent starts,
and its IntegrityError is reported the same way.
"""
from abc import ABC, abstractmethod
from datetime import date
from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from ..core.constants import (
    CANCELLABLE_SPRINT_STATUSES,
    ItemAction,
    ItemStatus,
    SprintAction,
    SprintStatus,
)
from ..core.exceptions import (
    InvalidDateRangeError,
    ItemAlreadyInSprintError,
    ItemNotFoundError,
    ItemNotInSprintError,
    NoActiveSprintError,
    ProjectNotFoundError,
    SprintAlreadyActiveError,
    SprintNotActiveError,
    SprintNotFoundError,
    SprintNotPlanningError,
    ValidationFailedError,
)
from ..models import BacklogItem, Sprint
from ..repositories import (
    BacklogRepository,
    SprintFilters,
    SprintRepository,
    SqlBacklogRepository,
    SqlSprintRepository,
)
from ..schemas import (
    BacklogItemResponse,
    SprintCreate,
    SprintHistoryResponse,
    SprintReport,
    SprintResponse,
    SprintUpdate,
    SprintWithItemsResponse,
)
from .base import TransactionalService, normalize_page
from .history_service import HistoryOperations, HistoryService

_EDITABLE_FIELDS = ("name", "goal", "start_date", "end_date")


def validate_date_range(start_date: date, end_date: date) -> None:
    if end_date <= start_date:
        raise InvalidDateRangeError()


def _sprint_ref(sprint_id: Optional[UUID]) -> Optional[str]:
    return str(sprint_id) if sprint_id is not None else None


class SprintOperations(ABC):

    @abstractmethod
    async def create(self, data: SprintCreate, user_id: UUID) -> Sprint: ...

    @abstractmethod
    async def get_by_id(self, sprint_id: UUID) -> Sprint: ...

    @abstractmethod
    async def get_all(self, filters: SprintFilters) -> Tuple[List[Sprint], int]: ...

    @abstractmethod
    async def get_with_items(self, sprint_id: UUID) -> SprintWithItemsResponse: ...

    @abstractmethod
    async def get_active(self, project_id: UUID) -> Sprint: ...

    @abstractmethod
    async def update(self, sprint_id: UUID, data: SprintUpdate, user_id: UUID) -> Sprint: ...

    @abstractmethod
    async def delete(self, sprint_id: UUID, user_id: UUID) -> None: ...

    @abstractmethod
    async def start(self, sprint_id: UUID, user_id: UUID) -> Sprint: ...

    @abstractmethod
    async def complete(self, sprint_id: UUID, user_id: UUID) -> Sprint: ...

    @abstractmethod
    async def cancel(self, sprint_id: UUID, user_id: UUID) -> Sprint: ...

    @abstractmethod
    async def add_item(self, sprint_id: UUID, item_id: UUID, user_id: UUID) -> BacklogItem: ...

    @abstractmethod
    async def remove_item(self, sprint_id: UUID, item_id: UUID, user_id: UUID) -> BacklogItem: ...

    @abstractmethod
    async def get_history(self, sprint_id: UUID) -> List[SprintHistoryResponse]: ...

    @abstractmethod
    async def get_report(self, sprint_id: UUID) -> SprintReport: ...


class SprintService(TransactionalService, SprintOperations):

    def __init__(
        self,
        db: AsyncSession,
        sprints: Optional[SprintRepository] = None,
        items: Optional[BacklogRepository] = None,
        history: Optional[HistoryOperations] = None
    ) -> None:
        super().__init__(db)
        self.sprints = sprints or SqlSprintRepository(db)
        self.items = items or SqlBacklogRepository(db)
        self.history = history or HistoryService(db)

    async def create(self, data: SprintCreate, user_id: UUID) -> Sprint:
        validate_date_range(data.start_date, data.end_date)

        name = data.name.strip()
        if not name:
            raise ValidationFailedError("Sprint name cannot be empty")

        self._logger.info("Creating sprint '%s' for project %s", name, data.project_id)

        async with self._unit_of_work(
            "Create sprint",
            on_integrity_error=lambda e: ProjectNotFoundError(data.project_id)
        ):
            sprint = Sprint(
                project_id=data.project_id,
                created_by_id=user_id,
                name=name,
                goal=data.goal,
                start_date=data.start_date,
                end_date=data.end_date,
                status=SprintStatus.PLANNING.value,
            )
            await self.sprints.create(sprint)
            await self.history.record_sprint(
                sprint.id,
                user_id,
                SprintAction.CREATED,
                new_value={
                    "name": name,
                    "start_date": data.start_date.isoformat(),
                    "end_date": data.end_date.isoformat(),
                    "status": SprintStatus.PLANNING.value,
                }
            )

        self._logger.info("Created sprint %s", sprint.id)
        return await self.get_by_id(sprint.id)

    async def get_by_id(self, sprint_id: UUID) -> Sprint:
        sprint = await self.sprints.get_by_id(sprint_id)
        if sprint is None:
            raise SprintNotFoundError(sprint_id)
        return sprint

    async def get_all(self, filters: SprintFilters) -> Tuple[List[Sprint], int]:
        filters.page, filters.limit = normalize_page(filters.page, filters.limit)
        return await self.sprints.get_all(filters)

    async def get_with_items(self, sprint_id: UUID) -> SprintWithItemsResponse:
        sprint = await self.get_by_id(sprint_id)
        items = await self.items.get_by_sprint_id(sprint_id)

        return SprintWithItemsResponse(
            **SprintResponse.model_validate(sprint).model_dump(),
            items=[BacklogItemResponse.model_validate(item) for item in items],
            total_items=len(items),
            total_points=sum(item.story_points or 0 for item in items),
        )

    async def get_active(self, project_id: UUID) -> Sprint:
        sprint = await self.sprints.get_active(project_id)
        if sprint is None:
            raise NoActiveSprintError(project_id)
        return sprint

    async def update(self, sprint_id: UUID, data: SprintUpdate, user_id: UUID) -> Sprint:
        changes: Dict[str, Any] = data.model_dump(exclude_unset=True)

        for field in ("name", "start_date", "end_date"):
            if field in changes and changes[field] is None:
                raise ValidationFailedError(f"{field} cannot be null")
        if "name" in changes:
            changes["name"] = changes["name"].strip()
            if not changes["name"]:
                raise ValidationFailedError("Sprint name cannot be empty")

        async with self._unit_of_work("Update sprint"):
            sprint = await self.get_by_id(sprint_id)

            # Validate the resulting range before touching the row
            validate_date_range(
                changes.get("start_date", sprint.start_date),
                changes.get("end_date", sprint.end_date)
            )

            diff: Dict[str, List[Any]] = {}
            for field in _EDITABLE_FIELDS:
                if field not in changes:
                    continue
                old_value = getattr(sprint, field)
                new_value = changes[field]
                if old_value != new_value:
                    diff[field] = [old_value, new_value]
                    setattr(sprint, field, new_value)

            if diff:
                await self.sprints.update(sprint)
                await self.history.record_sprint(
                    sprint.id,
                    user_id,
                    SprintAction.UPDATED,
                    new_value=diff
                )

        if diff:
            self._logger.info("Updated sprint %s: %s", sprint_id, ", ".join(diff))
        return await self.get_by_id(sprint_id)

    async def delete(self, sprint_id: UUID, user_id: UUID) -> None:
        async with self._unit_of_work("Delete sprint"):
            sprint = await self.get_by_id(sprint_id)

            # Items go back to the backlog and keep a record of it
            for item in await self.items.get_by_sprint_id(sprint.id):
                item.sprint_id = None
                await self.items.update(item)
                await self.history.record_item(
                    item.id,
                    user_id,
                    ItemAction.SPRINT_REMOVED,
                    field_changed="sprint_id",
                    old_value=_sprint_ref(sprint.id),
                    new_value=None
                )

            await self.sprints.delete(sprint)

        self._logger.info("Sprint %s deleted by user %s", sprint_id, user_id)

    async def start(self, sprint_id: UUID, user_id: UUID) -> Sprint:
        sprint = await self.get_by_id(sprint_id)
        project_id = sprint.project_id

        async with self._unit_of_work(
            "Start sprint",
            on_integrity_error=lambda e: SprintAlreadyActiveError(project_id)
        ):
            if sprint.status != SprintStatus.PLANNING.value:
                raise SprintNotPlanningError(sprint_id)

            active = await self.sprints.get_active(project_id)
            if active is not None and active.id != sprint_id:
                raise SprintAlreadyActiveError(project_id)

            old_status = sprint.status
            await self.sprints.update_status(sprint_id, SprintStatus.ACTIVE.value)
            await self.history.record_sprint(
                sprint_id,
                user_id,
                SprintAction.STARTED,
                old_value={"status": old_status},
                new_value={"status": SprintStatus.ACTIVE.value}
            )

        self._logger.info("Sprint %s started in project %s", sprint_id, project_id)
        return await self.get_by_id(sprint_id)

    async def complete(self, sprint_id: UUID, user_id: UUID) -> Sprint:
        async with self._unit_of_work("Complete sprint"):
            sprint = await self.get_by_id(sprint_id)
            if sprint.status != SprintStatus.ACTIVE.value:
                raise SprintNotActiveError(sprint_id)

            old_status = sprint.status
            velocity = await self.sprints.calculate_velocity(sprint_id)

            sprint.status = SprintStatus.COMPLETED.value
            sprint.velocity = velocity
            await self.sprints.update(sprint)
            await self.history.record_sprint(
                sprint_id,
                user_id,
                SprintAction.COMPLETED,
                old_value={"status": old_status},
                new_value={"status": SprintStatus.COMPLETED.value, "velocity": velocity}
            )

        self._logger.info("Sprint %s completed with velocity %d", sprint_id, velocity)
        return await self.get_by_id(sprint_id)

    async def cancel(self, sprint_id: UUID, user_id: UUID) -> Sprint:
        async with self._unit_of_work("Cancel sprint"):
            sprint = await self.get_by_id(sprint_id)
            if sprint.status not in [status.value for status in CANCELLABLE_SPRINT_STATUSES]:
                raise SprintNotActiveError(
                    sprint_id,
                    "Sprint must be in planning or active status to cancel"
                )

            old_status = sprint.status
            await self.sprints.update_status(sprint_id, SprintStatus.CANCELLED.value)
            await self.history.record_sprint(
                sprint_id,
                user_id,
                SprintAction.CANCELLED,
                old_value={"status": old_status},
                new_value={"status": SprintStatus.CANCELLED.value}
            )

        self._logger.info("Sprint %s cancelled (was %s)", sprint_id, old_status)
        return await self.get_by_id(sprint_id)

    async def add_item(self, sprint_id: UUID, item_id: UUID, user_id: UUID) -> BacklogItem:
        """Assign an item to the sprint, recording it on both ledgers.

        An item moving over from another sprint also leaves an ItemMoved
        entry on that sprint's ledger.
        """
        async with self._unit_of_work("Add item to sprint"):
            sprint = await self.get_by_id(sprint_id)
            item = await self.items.get_by_id(item_id, for_update=True)
            if item is None:
                raise ItemNotFoundError(item_id)

            if item.sprint_id == sprint.id:
                raise ItemAlreadyInSprintError(item_id)
            if item.project_id != sprint.project_id:
                raise ValidationFailedError(
                    "Item and sprint belong to different projects",
                    code="project_mismatch"
                )

            previous_sprint_id = item.sprint_id
            item.sprint_id = sprint.id
            await self.items.update(item)

            if previous_sprint_id is not None:
                await self.history.record_sprint(
                    previous_sprint_id,
                    user_id,
                    SprintAction.ITEM_MOVED,
                    old_value={"sprint_id": str(previous_sprint_id)},
                    new_value={"sprint_id": str(sprint.id)},
                    item_id=item.id
                )

            await self.history.record_sprint(
                sprint.id,
                user_id,
                SprintAction.ITEM_ADDED,
                new_value={"item_id": str(item.id), "item_title": item.title},
                item_id=item.id
            )
            await self.history.record_item(
                item.id,
                user_id,
                ItemAction.SPRINT_ASSIGNED,
                field_changed="sprint_id",
                old_value=_sprint_ref(previous_sprint_id),
                new_value=str(sprint.id)
            )

        self._logger.info("Item %s added to sprint %s", item_id, sprint_id)
        return await self._reload_item(item_id)

    async def remove_item(self, sprint_id: UUID, item_id: UUID, user_id: UUID) -> BacklogItem:
        async with self._unit_of_work("Remove item from sprint"):
            sprint = await self.get_by_id(sprint_id)
            item = await self.items.get_by_id(item_id, for_update=True)
            if item is None:
                raise ItemNotFoundError(item_id)

            if item.sprint_id != sprint.id:
                raise ItemNotInSprintError(item_id)

            item.sprint_id = None
            await self.items.update(item)

            await self.history.record_sprint(
                sprint.id,
                user_id,
                SprintAction.ITEM_REMOVED,
                old_value={"item_id": str(item.id), "item_title": item.title},
                item_id=item.id
            )
            await self.history.record_item(
                item.id,
                user_id,
                ItemAction.SPRINT_REMOVED,
                field_changed="sprint_id",
                old_value=str(sprint.id),
                new_value=None
            )

        self._logger.info("Item %s removed from sprint %s", item_id, sprint_id)
        return await self._reload_item(item_id)

    async def get_history(self, sprint_id: UUID) -> List[SprintHistoryResponse]:
        await self.get_by_id(sprint_id)
        return await self.history.get_sprint_history(sprint_id)

    async def get_report(self, sprint_id: UUID) -> SprintReport:
        sprint = await self.get_by_id(sprint_id)
        items = await self.items.get_by_sprint_id(sprint_id)

        done = [item for item in items if item.status == ItemStatus.DONE.value]
        total_points = sum(item.story_points or 0 for item in items)
        completed_points = sum(item.story_points or 0 for item in done)

        completion = 0.0
        if items:
            completion = round(len(done) / len(items) * 100, 2)

        # Stored velocity wins once the sprint is completed
        velocity = sprint.velocity if sprint.velocity is not None else completed_points

        return SprintReport(
            sprint=SprintResponse.model_validate(sprint),
            total_items=len(items),
            completed_items=len(done),
            total_story_points=total_points,
            completed_story_points=completed_points,
            completion_percentage=completion,
            velocity=velocity,
        )

    async def _reload_item(self, item_id: UUID) -> BacklogItem:
        item = await self.items.get_by_id(item_id)
        if item is None:
            raise ItemNotFoundError(item_id)
        return item

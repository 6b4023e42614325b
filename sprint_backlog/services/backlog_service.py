from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from ..core.constants import (
    ItemAction,
    ItemStatus,
    ItemType,
    Priority,
    UNASSIGNED_SPRINT,
    is_valid_value,
)
from ..core.exceptions import (
    InvalidItemTypeError,
    InvalidPriorityError,
    InvalidStatusError,
    ItemNotFoundError,
    ProjectNotFoundError,
    ValidationFailedError,
)
from ..models import BacklogItem, ItemHistory
from ..repositories import BacklogFilters, BacklogRepository, SqlBacklogRepository
from ..schemas import BacklogItemCreate, BacklogItemUpdate, ItemHistoryResponse
from .base import TransactionalService, normalize_page
from .history_service import HistoryOperations, HistoryService

# Fields that may never be cleared through an update
_REQUIRED_FIELDS = ("title", "type", "priority", "status", "labels")


def parse_sprint_filter(value: Optional[str]) -> Tuple[Optional[UUID], bool]:
    """Turn the ``sprint_id`` query value into (sprint id, unassigned only)."""
    if value is None or value == "":
        return None, False
    if value.lower() == UNASSIGNED_SPRINT:
        return None, True
    try:
        return UUID(value), False
    except ValueError:
        raise ValidationFailedError(f"Invalid sprint_id filter: {value}", code="invalid_sprint_filter")


def normalize_labels(labels: List[str]) -> List[str]:
    """Trim, drop blanks and de-duplicate while keeping first-seen order."""
    result: List[str] = []
    for label in labels:
        label = label.strip()
        if label and label not in result:
            result.append(label)
    return result


def _validate_enums(type_: Optional[str], priority: Optional[str], status: Optional[str]) -> None:
    if type_ is not None and not is_valid_value(ItemType, type_):
        raise InvalidItemTypeError(type_)
    if priority is not None and not is_valid_value(Priority, priority):
        raise InvalidPriorityError(priority)
    if status is not None and not is_valid_value(ItemStatus, status):
        raise InvalidStatusError(status)


class BacklogOperations(ABC):

    @abstractmethod
    async def create(self, data: BacklogItemCreate, user_id: UUID) -> BacklogItem: ...

    @abstractmethod
    async def get_by_id(self, item_id: UUID) -> BacklogItem: ...

    @abstractmethod
    async def get_all(self, filters: BacklogFilters) -> Tuple[List[BacklogItem], int]: ...

    @abstractmethod
    async def update(self, item_id: UUID, data: BacklogItemUpdate, user_id: UUID) -> BacklogItem: ...

    @abstractmethod
    async def delete(self, item_id: UUID, user_id: UUID) -> None: ...

    @abstractmethod
    async def update_status(self, item_id: UUID, status: str, user_id: UUID) -> BacklogItem: ...

    @abstractmethod
    async def update_priority(self, item_id: UUID, priority: str, user_id: UUID) -> BacklogItem: ...

    @abstractmethod
    async def add_label(self, item_id: UUID, label: str, user_id: UUID) -> BacklogItem: ...

    @abstractmethod
    async def remove_label(self, item_id: UUID, label: str, user_id: UUID) -> BacklogItem: ...

    @abstractmethod
    async def add_comment(self, item_id: UUID, comment: str, user_id: UUID) -> ItemHistory: ...

    @abstractmethod
    async def get_history(self, item_id: UUID) -> List[ItemHistoryResponse]: ...


class BacklogService(TransactionalService, BacklogOperations):
    """Backlog item store.

    Every mutation writes its item-ledger entry in the same transaction.
    Sprint assignment is owned by SprintService so that both ledgers
    record it.
    """

    def __init__(
        self,
        db: AsyncSession,
        items: Optional[BacklogRepository] = None,
        history: Optional[HistoryOperations] = None
    ) -> None:
        super().__init__(db)
        self.items = items or SqlBacklogRepository(db)
        self.history = history or HistoryService(db)

    async def create(self, data: BacklogItemCreate, user_id: UUID) -> BacklogItem:
        status = data.status or ItemStatus.NEW.value
        _validate_enums(data.type, data.priority, status)

        title = data.title.strip()
        if not title:
            raise ValidationFailedError("Title cannot be empty")

        description = data.description.strip() if data.description else None

        self._logger.info("Creating backlog item '%s' in project %s", title, data.project_id)

        async with self._unit_of_work(
            "Create backlog item",
            on_integrity_error=lambda e: ProjectNotFoundError(data.project_id)
        ):
            position = await self.items.get_max_position(data.project_id) + 1
            item = BacklogItem(
                project_id=data.project_id,
                created_by_id=user_id,
                title=title,
                description=description,
                type=data.type,
                priority=data.priority,
                status=status,
                story_points=data.story_points,
                labels=normalize_labels(data.labels),
                position=position,
            )
            await self.items.create(item)
            await self.history.record_item(
                item.id,
                user_id,
                ItemAction.CREATED,
                new_value={
                    "title": title,
                    "type": data.type,
                    "priority": data.priority,
                    "status": status,
                }
            )

        self._logger.info("Created backlog item %s at position %d", item.id, position)
        return await self.get_by_id(item.id)

    async def get_by_id(self, item_id: UUID) -> BacklogItem:
        item = await self.items.get_by_id(item_id)
        if item is None:
            raise ItemNotFoundError(item_id)
        return item

    async def get_all(self, filters: BacklogFilters) -> Tuple[List[BacklogItem], int]:
        filters.page, filters.limit = normalize_page(filters.page, filters.limit)
        return await self.items.get_all(filters)

    async def update(self, item_id: UUID, data: BacklogItemUpdate, user_id: UUID) -> BacklogItem:
        changes: Dict[str, Any] = data.model_dump(exclude_unset=True)

        for field in _REQUIRED_FIELDS:
            if field in changes and changes[field] is None:
                raise ValidationFailedError(f"{field} cannot be null")

        _validate_enums(changes.get("type"), changes.get("priority"), changes.get("status"))

        if "title" in changes:
            changes["title"] = changes["title"].strip()
            if not changes["title"]:
                raise ValidationFailedError("Title cannot be empty")
        if changes.get("description") is not None:
            changes["description"] = changes["description"].strip() or None
        if "labels" in changes:
            changes["labels"] = normalize_labels(changes["labels"])

        async with self._unit_of_work("Update backlog item"):
            item = await self.get_by_id(item_id)

            changed_fields: List[str] = []
            for field, new_value in changes.items():
                old_value = getattr(item, field)
                if old_value == new_value:
                    continue

                setattr(item, field, new_value)
                changed_fields.append(field)

                action = ItemAction.DESCRIPTION_UPDATED if field == "description" else ItemAction.UPDATED
                await self.history.record_item(
                    item.id,
                    user_id,
                    action,
                    field_changed=field,
                    old_value=old_value,
                    new_value=new_value
                )

            if changed_fields:
                await self.items.update(item)

        if changed_fields:
            self._logger.info("Updated backlog item %s: %s", item_id, ", ".join(changed_fields))
        return await self.get_by_id(item_id)

    async def delete(self, item_id: UUID, user_id: UUID) -> None:
        async with self._unit_of_work("Delete backlog item"):
            item = await self.get_by_id(item_id)
            await self.items.delete(item)

        self._logger.info("Backlog item %s deleted by user %s", item_id, user_id)

    async def update_status(self, item_id: UUID, status: str, user_id: UUID) -> BacklogItem:
        _validate_enums(None, None, status)

        async with self._unit_of_work("Update backlog item status"):
            item = await self.get_by_id(item_id)
            old_status = item.status
            if old_status != status:
                await self.items.update_status(item.id, status)
                await self.history.record_item(
                    item.id,
                    user_id,
                    ItemAction.STATUS_CHANGED,
                    field_changed="status",
                    old_value=old_status,
                    new_value=status
                )

        if old_status != status:
            self._logger.info("Backlog item %s status %s -> %s", item_id, old_status, status)
        return await self.get_by_id(item_id)

    async def update_priority(self, item_id: UUID, priority: str, user_id: UUID) -> BacklogItem:
        _validate_enums(None, priority, None)

        async with self._unit_of_work("Update backlog item priority"):
            item = await self.get_by_id(item_id)
            old_priority = item.priority
            if old_priority != priority:
                await self.items.update_priority(item.id, priority)
                await self.history.record_item(
                    item.id,
                    user_id,
                    ItemAction.PRIORITY_CHANGED,
                    field_changed="priority",
                    old_value=old_priority,
                    new_value=priority
                )

        if old_priority != priority:
            self._logger.info("Backlog item %s priority %s -> %s", item_id, old_priority, priority)
        return await self.get_by_id(item_id)

    async def add_label(self, item_id: UUID, label: str, user_id: UUID) -> BacklogItem:
        label = self._clean_label(label)

        async with self._unit_of_work("Add label"):
            await self.get_by_id(item_id)
            if await self.items.add_label(item_id, label):
                await self.history.record_item(
                    item_id,
                    user_id,
                    ItemAction.LABEL_ADDED,
                    field_changed="labels",
                    new_value=label
                )

        return await self.get_by_id(item_id)

    async def remove_label(self, item_id: UUID, label: str, user_id: UUID) -> BacklogItem:
        label = self._clean_label(label)

        async with self._unit_of_work("Remove label"):
            await self.get_by_id(item_id)
            if await self.items.remove_label(item_id, label):
                await self.history.record_item(
                    item_id,
                    user_id,
                    ItemAction.LABEL_REMOVED,
                    field_changed="labels",
                    old_value=label
                )

        return await self.get_by_id(item_id)

    async def add_comment(self, item_id: UUID, comment: str, user_id: UUID) -> ItemHistory:
        comment = (comment or "").strip()
        if not comment:
            raise ValidationFailedError("Comment cannot be empty")

        async with self._unit_of_work("Add comment"):
            await self.get_by_id(item_id)
            entry = await self.history.record_item(
                item_id,
                user_id,
                ItemAction.COMMENT_ADDED,
                comment=comment
            )

        return entry

    async def get_history(self, item_id: UUID) -> List[ItemHistoryResponse]:
        await self.get_by_id(item_id)
        return await self.history.get_item_history(item_id)

    @staticmethod
    def _clean_label(label: str) -> str:
        label = (label or "").strip()
        if not label:
            raise ValidationFailedError("Label cannot be empty")
        return label

"""
History ledger.

Records item and sprint events inside the caller's transaction and turns
stored rows back into client-facing entries. Payloads are opaque: they are
serialized to JSON on the way in and parsed on the way out, and a payload
that no longer parses is dropped from the response rather than failing
the read.
"""
import json
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, List, Optional
from uuid import UUID

from sqlalchemy import inspect
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.constants import ItemAction, SprintAction
from ..models import ItemHistory, SprintHistory
from ..repositories import (
    ItemHistoryRepository,
    SprintHistoryRepository,
    SqlItemHistoryRepository,
    SqlSprintHistoryRepository,
)
from ..schemas import (
    ItemHistoryResponse,
    ItemSummary,
    SprintHistoryResponse,
    SprintSummary,
    UserSummary,
)

logger = logging.getLogger(__name__)


def encode_payload(value: Any) -> Optional[str]:
    if value is None:
        return None
    return json.dumps(value, default=str)


def decode_payload(raw: Optional[str]) -> Any:
    if raw is None:
        return None
    try:
        return json.loads(raw)
    except (TypeError, ValueError):
        logger.warning("Dropping undecodable history payload: %r", raw[:100])
        return None


def as_utc(value: datetime) -> datetime:
    """SQLite hands back naive datetimes; treat them as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def loaded(instance: Any, attribute: str) -> Any:
    """Return a relationship only if it is already loaded, never lazy-load it."""
    if instance is None or attribute in inspect(instance).unloaded:
        return None
    return getattr(instance, attribute)


def user_summary(instance: Any) -> Optional[UserSummary]:
    user = loaded(instance, "user")
    return UserSummary.model_validate(user) if user is not None else None


def item_summary(instance: Any) -> Optional[ItemSummary]:
    item = loaded(instance, "item")
    return ItemSummary.model_validate(item) if item is not None else None


def sprint_summary(instance: Any) -> Optional[SprintSummary]:
    sprint = loaded(instance, "sprint")
    return SprintSummary.model_validate(sprint) if sprint is not None else None


class HistoryOperations(ABC):
    """Append and query operations over both ledgers."""

    @abstractmethod
    async def record_item(
        self,
        item_id: UUID,
        user_id: UUID,
        action: ItemAction,
        field_changed: Optional[str] = None,
        old_value: Any = None,
        new_value: Any = None,
        comment: Optional[str] = None
    ) -> ItemHistory: ...

    @abstractmethod
    async def record_sprint(
        self,
        sprint_id: UUID,
        user_id: UUID,
        action: SprintAction,
        old_value: Any = None,
        new_value: Any = None,
        item_id: Optional[UUID] = None
    ) -> SprintHistory: ...

    @abstractmethod
    async def get_item_history(self, item_id: UUID) -> List[ItemHistoryResponse]: ...

    @abstractmethod
    async def get_sprint_history(self, sprint_id: UUID) -> List[SprintHistoryResponse]: ...

    @abstractmethod
    async def get_user_item_history(self, user_id: UUID, limit: int = 0) -> List[ItemHistory]: ...

    @abstractmethod
    async def get_user_sprint_history(self, user_id: UUID, limit: int = 0) -> List[SprintHistory]: ...


class HistoryService(HistoryOperations):
    """Ledger writer/reader. Never commits; callers own the transaction."""

    def __init__(
        self,
        db: AsyncSession,
        item_history: Optional[ItemHistoryRepository] = None,
        sprint_history: Optional[SprintHistoryRepository] = None
    ) -> None:
        self.db = db
        self.item_history = item_history or SqlItemHistoryRepository(db)
        self.sprint_history = sprint_history or SqlSprintHistoryRepository(db)

    async def record_item(
        self,
        item_id: UUID,
        user_id: UUID,
        action: ItemAction,
        field_changed: Optional[str] = None,
        old_value: Any = None,
        new_value: Any = None,
        comment: Optional[str] = None
    ) -> ItemHistory:
        entry = ItemHistory(
            item_id=item_id,
            user_id=user_id,
            action=action.value,
            field_changed=field_changed,
            old_value=encode_payload(old_value),
            new_value=encode_payload(new_value),
            comment=comment,
        )
        return await self.item_history.create(entry)

    async def record_sprint(
        self,
        sprint_id: UUID,
        user_id: UUID,
        action: SprintAction,
        old_value: Any = None,
        new_value: Any = None,
        item_id: Optional[UUID] = None
    ) -> SprintHistory:
        entry = SprintHistory(
            sprint_id=sprint_id,
            user_id=user_id,
            item_id=item_id,
            action=action.value,
            old_value=encode_payload(old_value),
            new_value=encode_payload(new_value),
        )
        return await self.sprint_history.create(entry)

    async def get_item_history(self, item_id: UUID) -> List[ItemHistoryResponse]:
        entries = await self.item_history.get_by_item_id(item_id)
        return [self.to_item_response(entry) for entry in entries]

    async def get_sprint_history(self, sprint_id: UUID) -> List[SprintHistoryResponse]:
        entries = await self.sprint_history.get_by_sprint_id(sprint_id)
        return [self.to_sprint_response(entry) for entry in entries]

    async def get_user_item_history(self, user_id: UUID, limit: int = 0) -> List[ItemHistory]:
        return await self.item_history.get_by_user_id(user_id, limit)

    async def get_user_sprint_history(self, user_id: UUID, limit: int = 0) -> List[SprintHistory]:
        return await self.sprint_history.get_by_user_id(user_id, limit)

    @staticmethod
    def to_item_response(entry: ItemHistory) -> ItemHistoryResponse:
        return ItemHistoryResponse(
            id=entry.id,
            item_id=entry.item_id,
            user_id=entry.user_id,
            user=user_summary(entry),
            action=entry.action,
            field_changed=entry.field_changed,
            old_value=decode_payload(entry.old_value),
            new_value=decode_payload(entry.new_value),
            comment=entry.comment,
            timestamp=as_utc(entry.timestamp),
        )

    @staticmethod
    def to_sprint_response(entry: SprintHistory) -> SprintHistoryResponse:
        return SprintHistoryResponse(
            id=entry.id,
            sprint_id=entry.sprint_id,
            user_id=entry.user_id,
            user=user_summary(entry),
            item_id=entry.item_id,
            item=item_summary(entry),
            action=entry.action,
            old_value=decode_payload(entry.old_value),
            new_value=decode_payload(entry.new_value),
            timestamp=as_utc(entry.timestamp),
        )

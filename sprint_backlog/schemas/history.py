"""Ledger entries as returned to clients.

``old_value``/``new_value`` are whatever JSON was recorded, or ``None``
when the stored payload could not be decoded.
"""
from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel

from .common import ItemSummary, UserSummary


class ItemHistoryResponse(BaseModel):
    id: UUID
    item_id: UUID
    user_id: UUID
    user: Optional[UserSummary] = None
    action: str
    field_changed: Optional[str] = None
    old_value: Any = None
    new_value: Any = None
    comment: Optional[str] = None
    timestamp: datetime


class SprintHistoryResponse(BaseModel):
    id: UUID
    sprint_id: UUID
    user_id: UUID
    user: Optional[UserSummary] = None
    item_id: Optional[UUID] = None
    item: Optional[ItemSummary] = None
    action: str
    old_value: Any = None
    new_value: Any = None
    timestamp: datetime

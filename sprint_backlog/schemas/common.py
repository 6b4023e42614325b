"""Summaries embedded in other responses."""
import math
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class UserSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    email: str
    avatar_url: Optional[str] = None


class ItemSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    title: str
    type: str


class SprintSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str


def total_pages(total: int, limit: int) -> int:
    if limit <= 0:
        return 1 if total else 0
    return math.ceil(total / limit)

"""
Persistence interfaces.

Services depend on these abstractions only; the SQLAlchemy implementations
live next to them and can be swapped for test doubles. Repositories flush
but never commit: the calling service owns the transaction.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Optional, Tuple
from uuid import UUID

from ..models import BacklogItem, ItemHistory, Project, Sprint, SprintHistory, User


@dataclass
class BacklogFilters:
    search: Optional[str] = None
    types: List[str] = field(default_factory=list)
    priorities: List[str] = field(default_factory=list)
    statuses: List[str] = field(default_factory=list)
    sprint_id: Optional[UUID] = None
    unassigned_only: bool = False
    labels: List[str] = field(default_factory=list)
    project_id: Optional[UUID] = None
    page: int = 1
    limit: int = 10


@dataclass
class SprintFilters:
    project_id: Optional[UUID] = None
    statuses: List[str] = field(default_factory=list)
    page: int = 1
    limit: int = 10


class UserRepository(ABC):

    @abstractmethod
    async def create(self, user: User) -> User: ...

    @abstractmethod
    async def get_by_id(self, user_id: UUID) -> Optional[User]: ...

    @abstractmethod
    async def get_by_google_id(self, google_id: str) -> Optional[User]: ...

    @abstractmethod
    async def get_by_email(self, email: str) -> Optional[User]: ...

    @abstractmethod
    async def get_all(self) -> List[User]: ...

    @abstractmethod
    async def update(self, user: User) -> User: ...


class ProjectRepository(ABC):

    @abstractmethod
    async def create(self, project: Project) -> Project: ...

    @abstractmethod
    async def get_by_id(self, project_id: UUID) -> Optional[Project]: ...

    @abstractmethod
    async def get_by_key(self, key: str) -> Optional[Project]: ...

    @abstractmethod
    async def get_page(self, page: int, limit: int) -> Tuple[List[Project], int]: ...

    @abstractmethod
    async def update(self, project: Project) -> Project: ...

    @abstractmethod
    async def delete(self, project: Project) -> None: ...


class BacklogRepository(ABC):

    @abstractmethod
    async def create(self, item: BacklogItem) -> BacklogItem: ...

    @abstractmethod
    async def get_by_id(self, item_id: UUID, for_update: bool = False) -> Optional[BacklogItem]: ...

    @abstractmethod
    async def get_all(self, filters: BacklogFilters) -> Tuple[List[BacklogItem], int]: ...

    @abstractmethod
    async def get_by_sprint_id(self, sprint_id: UUID) -> List[BacklogItem]: ...

    @abstractmethod
    async def update(self, item: BacklogItem) -> BacklogItem: ...

    @abstractmethod
    async def delete(self, item: BacklogItem) -> None: ...

    @abstractmethod
    async def update_status(self, item_id: UUID, status: str) -> None: ...

    @abstractmethod
    async def update_priority(self, item_id: UUID, priority: str) -> None: ...

    @abstractmethod
    async def add_label(self, item_id: UUID, label: str) -> bool:
        """Append ``label`` unless present; returns whether the set changed."""

    @abstractmethod
    async def remove_label(self, item_id: UUID, label: str) -> bool:
        """Remove ``label`` if present; returns whether the set changed."""

    @abstractmethod
    async def get_max_position(self, project_id: UUID) -> int: ...


class SprintRepository(ABC):

    @abstractmethod
    async def create(self, sprint: Sprint) -> Sprint: ...

    @abstractmethod
    async def get_by_id(self, sprint_id: UUID) -> Optional[Sprint]: ...

    @abstractmethod
    async def get_all(self, filters: SprintFilters) -> Tuple[List[Sprint], int]: ...

    @abstractmethod
    async def get_active(self, project_id: UUID) -> Optional[Sprint]: ...

    @abstractmethod
    async def update(self, sprint: Sprint) -> Sprint: ...

    @abstractmethod
    async def delete(self, sprint: Sprint) -> None: ...

    @abstractmethod
    async def update_status(self, sprint_id: UUID, status: str) -> None: ...

    @abstractmethod
    async def calculate_velocity(self, sprint_id: UUID) -> int: ...


class ItemHistoryRepository(ABC):

    @abstractmethod
    async def create(self, entry: ItemHistory) -> ItemHistory: ...

    @abstractmethod
    async def get_by_item_id(self, item_id: UUID) -> List[ItemHistory]: ...

    @abstractmethod
    async def get_by_user_id(self, user_id: UUID, limit: int = 0) -> List[ItemHistory]: ...


class SprintHistoryRepository(ABC):

    @abstractmethod
    async def create(self, entry: SprintHistory) -> SprintHistory: ...

    @abstractmethod
    async def get_by_sprint_id(self, sprint_id: UUID) -> List[SprintHistory]: ...

    @abstractmethod
    async def get_by_user_id(self, user_id: UUID, limit: int = 0) -> List[SprintHistory]: ...


__all__ = [
    "BacklogFilters",
    "SprintFilters",
    "UserRepository",
    "ProjectRepository",
    "BacklogRepository",
    "SprintRepository",
    "ItemHistoryRepository",
    "SprintHistoryRepository",
]

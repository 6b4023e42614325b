from .base import (
    BacklogFilters,
    SprintFilters,
    UserRepository,
    ProjectRepository,
    BacklogRepository,
    SprintRepository,
    ItemHistoryRepository,
    SprintHistoryRepository,
)
from .users import SqlUserRepository
from .projects import SqlProjectRepository
from .backlog import SqlBacklogRepository
from .sprints import SqlSprintRepository
from .history import SqlItemHistoryRepository, SqlSprintHistoryRepository

__all__ = [
    "BacklogFilters",
    "SprintFilters",
    "UserRepository",
    "ProjectRepository",
    "BacklogRepository",
    "SprintRepository",
    "ItemHistoryRepository",
    "SprintHistoryRepository",
    "SqlUserRepository",
    "SqlProjectRepository",
    "SqlBacklogRepository",
    "SqlSprintRepository",
    "SqlItemHistoryRepository",
    "SqlSprintHistoryRepository",
]

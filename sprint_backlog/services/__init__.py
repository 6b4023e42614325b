from .base import TransactionalService, normalize_page
from .history_service import HistoryOperations, HistoryService
from .activity_service import ActivityService
from .backlog_service import BacklogOperations, BacklogService
from .sprint_service import SprintOperations, SprintService
from .project_service import ProjectService
from .user_service import UserService
from .auth_service import AuthService

__all__ = [
    "TransactionalService",
    "normalize_page",
    "HistoryOperations",
    "HistoryService",
    "ActivityService",
    "BacklogOperations",
    "BacklogService",
    "SprintOperations",
    "SprintService",
    "ProjectService",
    "UserService",
    "AuthService",
]

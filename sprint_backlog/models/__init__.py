from .base import Base, BaseModel
from .user import User
from .project import Project
from .sprint import Sprint
from .backlog import BacklogItem
from .history import ItemHistory, SprintHistory

__all__ = [
    "Base",
    "BaseModel",
    "User",
    "Project",
    "Sprint",
    "BacklogItem",
    "ItemHistory",
    "SprintHistory",
]

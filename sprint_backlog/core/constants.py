from enum import Enum
from typing import Any, Type


class ItemType(str, Enum):
    STORY = "Story"
    BUG = "Bug"
    TASK = "Task"
    EPIC = "Epic"


class Priority(str, Enum):
    CRITICAL = "Critical"
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class ItemStatus(str, Enum):
    NEW = "New"
    READY = "Ready"
    IN_PROGRESS = "In Progress"
    DONE = "Done"
    ARCHIVED = "Archived"


class SprintStatus(str, Enum):
    PLANNING = "Planning"
    ACTIVE = "Active"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


class ItemAction(str, Enum):
    CREATED = "Created"
    UPDATED = "Updated"
    STATUS_CHANGED = "StatusChanged"
    PRIORITY_CHANGED = "PriorityChanged"
    SPRINT_ASSIGNED = "SprintAssigned"
    SPRINT_REMOVED = "SprintRemoved"
    COMMENT_ADDED = "CommentAdded"
    LABEL_ADDED = "LabelAdded"
    LABEL_REMOVED = "LabelRemoved"
    DESCRIPTION_UPDATED = "DescriptionUpdated"


class SprintAction(str, Enum):
    CREATED = "Created"
    UPDATED = "Updated"
    STARTED = "Started"
    ITEM_ADDED = "ItemAdded"
    ITEM_REMOVED = "ItemRemoved"
    ITEM_MOVED = "ItemMoved"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


class ActivityType(str, Enum):
    ITEM = "item"
    SPRINT = "sprint"


# Sprint states that may still be cancelled
CANCELLABLE_SPRINT_STATUSES = (SprintStatus.PLANNING, SprintStatus.ACTIVE)

# Query value for "items not assigned to any sprint"
UNASSIGNED_SPRINT = "none"

DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100

# Page size for /users/{id}/activities when none (or a non-positive one) is given
DEFAULT_ACTIVITY_LIMIT = 50


def is_valid_value(enum_cls: Type[Enum], value: Any) -> bool:
    """Type guard to check if a raw value belongs to an enum."""
    try:
        enum_cls(value)
        return True
    except ValueError:
        return False

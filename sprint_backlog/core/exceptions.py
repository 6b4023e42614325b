from __future__ import annotations

from enum import Enum
from typing import Any, Optional


class ErrorCategory(str, Enum):
    NOT_FOUND = "not_found"
    VALIDATION = "validation"
    CONFLICT = "conflict"
    INTERNAL = "internal"


class ServiceError(Exception):
    """Base exception for service-layer errors.

    Every error carries a category so the API layer can pick a response
    without matching on message text.
    """

    category: ErrorCategory = ErrorCategory.INTERNAL
    code: str = "internal_error"

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        entity_id: Optional[Any] = None
    ) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        self.entity_id = entity_id


class NotFoundError(ServiceError):
    category = ErrorCategory.NOT_FOUND
    code = "not_found"


class ValidationFailedError(ServiceError):
    category = ErrorCategory.VALIDATION
    code = "validation_failed"


class ConflictError(ServiceError):
    category = ErrorCategory.CONFLICT
    code = "conflict"


class StoreError(ServiceError):
    """Persistence failure surfaced as an opaque internal error."""

    category = ErrorCategory.INTERNAL
    code = "store_error"


# Not found

class UserNotFoundError(NotFoundError):
    code = "user_not_found"

    def __init__(self, user_id: Any) -> None:
        super().__init__(f"User {user_id} not found", entity_id=user_id)


class ProjectNotFoundError(NotFoundError):
    code = "project_not_found"

    def __init__(self, project_id: Any) -> None:
        super().__init__(f"Project {project_id} not found", entity_id=project_id)


class SprintNotFoundError(NotFoundError):
    code = "sprint_not_found"

    def __init__(self, sprint_id: Any) -> None:
        super().__init__(f"Sprint {sprint_id} not found", entity_id=sprint_id)


class ItemNotFoundError(NotFoundError):
    code = "item_not_found"

    def __init__(self, item_id: Any) -> None:
        super().__init__(f"Backlog item {item_id} not found", entity_id=item_id)


class NoActiveSprintError(NotFoundError):
    code = "no_active_sprint"

    def __init__(self, project_id: Any) -> None:
        super().__init__(f"No active sprint in project {project_id}", entity_id=project_id)


# Validation

class InvalidItemTypeError(ValidationFailedError):
    code = "invalid_item_type"

    def __init__(self, value: Any) -> None:
        super().__init__(f"Invalid item type: {value}")


class InvalidPriorityError(ValidationFailedError):
    code = "invalid_priority"

    def __init__(self, value: Any) -> None:
        super().__init__(f"Invalid priority: {value}")


class InvalidStatusError(ValidationFailedError):
    code = "invalid_status"

    def __init__(self, value: Any) -> None:
        super().__init__(f"Invalid status: {value}")


class InvalidDateRangeError(ValidationFailedError):
    code = "invalid_date_range"

    def __init__(self) -> None:
        super().__init__("End date must be after start date")


class InvalidProjectKeyError(ValidationFailedError):
    code = "invalid_project_key"

    def __init__(self, key: str) -> None:
        super().__init__(f"Project key must be 2-10 uppercase alphanumeric characters: {key!r}")


# Conflicts

class SprintAlreadyActiveError(ConflictError):
    code = "sprint_already_active"

    def __init__(self, project_id: Any) -> None:
        super().__init__(
            "There is already an active sprint in this project",
            entity_id=project_id
        )


class SprintNotPlanningError(ConflictError):
    code = "sprint_not_planning"

    def __init__(self, sprint_id: Any) -> None:
        super().__init__("Sprint must be in planning status to start", entity_id=sprint_id)


class SprintNotActiveError(ConflictError):
    code = "sprint_not_active"

    def __init__(
        self,
        sprint_id: Any,
        message: str = "Sprint must be in active status to complete"
    ) -> None:
        super().__init__(message, entity_id=sprint_id)


class ItemAlreadyInSprintError(ConflictError):
    code = "item_already_in_sprint"

    def __init__(self, item_id: Any) -> None:
        super().__init__("Item is already in this sprint", entity_id=item_id)


class ItemNotInSprintError(ConflictError):
    code = "item_not_in_sprint"

    def __init__(self, item_id: Any) -> None:
        super().__init__("Item is not in this sprint", entity_id=item_id)


class ProjectKeyExistsError(ConflictError):
    code = "project_key_exists"

    def __init__(self, key: str) -> None:
        super().__init__(f"Project key {key} already exists")


class AuthenticationFailedError(ServiceError):
    """Google code exchange or identity lookup failed."""

    category = ErrorCategory.VALIDATION
    code = "authentication_failed"

"""Per-request service construction."""
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db
from ..services import (
    AuthService,
    BacklogService,
    ProjectService,
    SprintService,
    UserService,
)


def get_backlog_service(db: AsyncSession = Depends(get_db)) -> BacklogService:
    return BacklogService(db)


def get_sprint_service(db: AsyncSession = Depends(get_db)) -> SprintService:
    return SprintService(db)


def get_project_service(db: AsyncSession = Depends(get_db)) -> ProjectService:
    return ProjectService(db)


def get_user_service(db: AsyncSession = Depends(get_db)) -> UserService:
    return UserService(db)


def get_auth_service(db: AsyncSession = Depends(get_db)) -> AuthService:
    return AuthService(db)

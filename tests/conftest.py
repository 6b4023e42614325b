"""
Pytest configuration and shared fixtures.

Every test gets its own in-memory SQLite database. Fixtures hand out ids
rather than ORM instances: a rolled-back session expires everything it
holds, and tests routinely provoke rollbacks.
"""
import os

os.environ.setdefault("ENVIRONMENT", "testing")

import pytest
from datetime import date, timedelta
from typing import AsyncGenerator
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from sprint_backlog.core.auth import create_access_token
from sprint_backlog.database import build_engine, build_session_factory, get_db
from sprint_backlog.main import app
from sprint_backlog.models import Base, Project, User
from sprint_backlog.schemas import BacklogItemCreate, SprintCreate
from sprint_backlog.services import BacklogService, SprintService


TEST_DATABASE_URL = "sqlite+aiosqlite://"


# ============================================================================
# Database Fixtures
# ============================================================================

@pytest.fixture
async def db_engine():
    engine = build_engine(TEST_DATABASE_URL)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return build_session_factory(db_engine)


@pytest.fixture
async def db(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


# ============================================================================
# Data Fixtures
# ============================================================================

async def _create_user(db: AsyncSession, handle: str) -> User:
    user = User(
        google_id=f"google-{handle}",
        name=handle.title(),
        email=f"{handle}@example.com",
    )
    db.add(user)
    await db.commit()
    return user


@pytest.fixture
async def user_id(db):
    user = await _create_user(db, "alice")
    return user.id


@pytest.fixture
async def other_user_id(db):
    user = await _create_user(db, "bob")
    return user.id


@pytest.fixture
async def project_id(db, user_id):
    project = Project(name="Web Platform", key="WEB", created_by_id=user_id)
    db.add(project)
    await db.commit()
    return project.id


@pytest.fixture
def backlog_service(db):
    return BacklogService(db)


@pytest.fixture
def sprint_service(db):
    return SprintService(db)


@pytest.fixture
def make_item(backlog_service, project_id, user_id):
    """Create a backlog item and return its id."""

    async def _make_item(title="Login page", **overrides):
        data = {
            "project_id": project_id,
            "title": title,
            "type": "Story",
            "priority": "Medium",
        }
        data.update(overrides)
        item = await backlog_service.create(BacklogItemCreate(**data), user_id)
        return item.id

    return _make_item


@pytest.fixture
def make_sprint(sprint_service, project_id, user_id):
    """Create a Planning sprint and return its id."""

    async def _make_sprint(name="Sprint 1", start=None, days=14, **overrides):
        start = start or date(2024, 1, 1)
        data = {
            "project_id": project_id,
            "name": name,
            "start_date": start,
            "end_date": start + timedelta(days=days),
        }
        data.update(overrides)
        sprint = await sprint_service.create(SprintCreate(**data), user_id)
        return sprint.id

    return _make_sprint


# ============================================================================
# API Fixtures
# ============================================================================

@pytest.fixture
def auth_headers(user_id):
    token = create_access_token({"sub": str(user_id)})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()

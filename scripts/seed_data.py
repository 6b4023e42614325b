#!/usr/bin/env python3
"""
Seed data for local development.

Creates a handful of users, one project, a backlog and two sprints (one
completed, one active). Everything goes through the services so the item
and sprint histories are populated as they would be in real use.

Usage:
    python scripts/seed_data.py              # Add seed data
    python scripts/seed_data.py --clear      # Clear all data first
"""
import asyncio
import sys
import os
from datetime import date, timedelta
from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sprint_backlog.database import async_session, engine, init_models
from sprint_backlog.models import (
    BacklogItem,
    ItemHistory,
    Project,
    Sprint,
    SprintHistory,
    User,
)
from sprint_backlog.schemas import BacklogItemCreate, ProjectCreate, SprintCreate
from sprint_backlog.services import BacklogService, ProjectService, SprintService


# ==================== DATA DEFINITIONS ====================

USERS_DATA = [
    {"google_id": "seed-alice", "email": "alice@company.com", "name": "Alice Johnson"},
    {"google_id": "seed-bob", "email": "bob@company.com", "name": "Bob Martinez"},
    {"google_id": "seed-carol", "email": "carol@company.com", "name": "Carol Williams"},
]

PROJECT_DATA = {
    "name": "Web Platform",
    "key": "WEB",
    "description": "Customer-facing web application",
}

BACKLOG_ITEMS = [
    {"title": "User Authentication System", "type": "Story", "priority": "High", "story_points": 8, "status": "Done", "labels": ["auth", "backend"]},
    {"title": "Dashboard Analytics View", "type": "Story", "priority": "High", "story_points": 5, "status": "Done", "labels": ["frontend"]},
    {"title": "Payment Gateway Integration", "type": "Story", "priority": "Critical", "story_points": 8, "status": "In Progress", "labels": ["payments"]},
    {"title": "Email Notification System", "type": "Task", "priority": "Medium", "story_points": 5, "status": "Ready", "labels": ["backend"]},
    {"title": "Search returns stale results", "type": "Bug", "priority": "High", "story_points": 3, "status": "New", "labels": ["search"]},
    {"title": "Password Reset Flow", "type": "Story", "priority": "High", "story_points": 3, "status": "In Progress", "labels": ["auth"]},
    {"title": "Pagination for Lists", "type": "Task", "priority": "Medium", "story_points": 2, "status": "New", "labels": []},
    {"title": "Dark Mode", "type": "Story", "priority": "Low", "story_points": 5, "status": "New", "labels": ["frontend"]},
    {"title": "Mobile Experience", "type": "Epic", "priority": "Medium", "story_points": None, "status": "New", "labels": []},
]


# ==================== SEED FUNCTIONS ====================

async def clear_all_data(session: AsyncSession):
    """Clear all data from the database"""
    print("Clearing existing data...")

    # Delete in correct order (respecting foreign keys)
    await session.execute(delete(ItemHistory))
    await session.execute(delete(SprintHistory))
    await session.execute(delete(BacklogItem))
    await session.execute(delete(Sprint))
    await session.execute(delete(Project))
    await session.execute(delete(User))

    await session.commit()
    print("All data cleared")


async def create_users(session: AsyncSession):
    print("\nCreating users...")

    users = []
    for user_data in USERS_DATA:
        user = User(**user_data)
        session.add(user)
        users.append(user)
        print(f"  + {user.name} ({user.email})")

    await session.commit()
    return users


async def create_project(session: AsyncSession, owner: User) -> Project:
    print("\nCreating project...")
    project = await ProjectService(session).create(ProjectCreate(**PROJECT_DATA), owner.id)
    print(f"  + {project.key}: {project.name}")
    return project


async def create_backlog(session: AsyncSession, project: Project, users):
    print("\nCreating backlog items...")

    service = BacklogService(session)
    items = []
    for idx, item_data in enumerate(BACKLOG_ITEMS):
        author = users[idx % len(users)]
        item = await service.create(
            BacklogItemCreate(project_id=project.id, **item_data),
            author.id
        )
        items.append(item)

    print(f"  + {len(items)} items")
    return items


async def create_sprints(session: AsyncSession, project: Project, items, users):
    print("\nCreating sprints...")

    service = SprintService(session)
    lead = users[0]
    today = date.today()

    previous = await service.create(
        SprintCreate(
            project_id=project.id,
            name="Sprint 1",
            goal="Sign-in and dashboard",
            start_date=today - timedelta(days=17),
            end_date=today - timedelta(days=3),
        ),
        lead.id
    )
    for item in items[:2]:
        await service.add_item(previous.id, item.id, lead.id)
    await service.start(previous.id, lead.id)
    previous = await service.complete(previous.id, lead.id)
    print(f"  + {previous.name}: {previous.status}, velocity {previous.velocity}")

    current = await service.create(
        SprintCreate(
            project_id=project.id,
            name="Sprint 2",
            goal="Payments and account recovery",
            start_date=today - timedelta(days=2),
            end_date=today + timedelta(days=12),
        ),
        lead.id
    )
    for idx, item in enumerate(items[2:6]):
        await service.add_item(current.id, item.id, users[idx % len(users)].id)
    current = await service.start(current.id, lead.id)
    print(f"  + {current.name}: {current.status}")


# ==================== MAIN ====================

async def seed_database(clear_first: bool = False):
    """Main seed function"""
    print("=" * 60)
    print("Sprint Backlog - Database Seeding")
    print("=" * 60)

    await init_models(engine)

    async with async_session() as session:
        if clear_first:
            await clear_all_data(session)

        users = await create_users(session)
        project = await create_project(session, users[0])
        items = await create_backlog(session, project, users)
        await create_sprints(session, project, items, users)

    await engine.dispose()

    print("\n" + "=" * 60)
    print("Database seeding complete!")


if __name__ == "__main__":
    asyncio.run(seed_database(clear_first="--clear" in sys.argv))

#!/usr/bin/env python3
"""
Initialize database with all tables
"""
import asyncio
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sprint_backlog.database import engine, init_models
from sprint_backlog.models import Base


async def init_database():
    """Create all tables"""
    print("Initializing database...")
    print(f"Creating tables: {', '.join([t.name for t in Base.metadata.sorted_tables])}")

    await init_models(engine)
    await engine.dispose()

    print("Database initialized successfully!")


if __name__ == "__main__":
    asyncio.run(init_database())

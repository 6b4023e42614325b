from typing import Any, AsyncGenerator, Dict
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool
from .config import settings
from .models import Base


def build_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """Create an async engine; in-memory SQLite shares one connection."""
    options: Dict[str, Any] = {"echo": echo, "future": True}

    if database_url.startswith("sqlite"):
        options["connect_args"] = {"check_same_thread": False}
        if database_url.endswith("://") or ":memory:" in database_url:
            options["poolclass"] = StaticPool

    engine = create_async_engine(database_url, **options)

    if database_url.startswith("sqlite"):
        # SQLite only enforces foreign keys when asked to, per connection
        @event.listens_for(engine.sync_engine, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return engine


def build_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind,
        class_=AsyncSession,
        expire_on_commit=False
    )


# Create async engine
engine = build_engine(settings.database_url, settings.database_echo)

# Create session factory
async_session = build_session_factory(engine)


async def init_models(bind: AsyncEngine) -> None:
    """Create all tables"""
    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


# Dependency to get database session
async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with async_session() as session:
        try:
            yield session
        finally:
            await session.close()

"""Async SQLAlchemy engine and session factory.

Learn: SQLAlchemy 2.0 async mode. create_async_engine for connection pooling,
AsyncSession for per-request database access, dependency injection via FastAPI.

The engine is built from Settings inside create_app() and kept on
app.state; get_db() pulls the session factory from there, so there is
no module-level engine to import.
"""

from typing import AsyncIterator

from fastapi import Request
from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from devtasks.config import Settings
from devtasks.db.models import Base


def build_engine(settings: Settings) -> AsyncEngine:
    """Create the engine for the configured database URL."""
    url = settings.database_url
    if url.startswith("sqlite"):
        kwargs: dict = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in url or url.rstrip("/").endswith("sqlite+aiosqlite:"):
            # One shared connection, otherwise every session sees an empty DB
            kwargs["poolclass"] = StaticPool
        engine = create_async_engine(url, echo=settings.db_echo, **kwargs)
        _enable_sqlite_foreign_keys(engine)
        return engine

    # Connection pool: min 5, max 20 connections.
    return create_async_engine(
        url,
        echo=settings.db_echo,
        pool_size=5,
        max_overflow=15,
    )


def _enable_sqlite_foreign_keys(engine: AsyncEngine) -> None:
    """SQLite ignores FK clauses (cascade, set null) unless asked per connection."""

    @event.listens_for(engine.sync_engine, "connect")
    def _set_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # each request gets its own session
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def create_schema(engine: AsyncEngine) -> None:
    """Create all tables that don't exist yet (dev / SQLite / tests)."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_db(request: Request) -> AsyncIterator[AsyncSession]:
    """FastAPI dependency: yields a session per request, closes it afterwards."""
    factory: async_sessionmaker[AsyncSession] = request.app.state.session_factory
    async with factory() as session:
        try:
            yield session
        finally:
            await session.close()

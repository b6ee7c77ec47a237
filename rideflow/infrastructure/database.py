"""
Async SQLAlchemy engine and session factory.

The store defaults to an in-memory SQLite database (``aiosqlite`` driver)
shared through a ``StaticPool``: every session talks to the same
connection, so all entities live in process memory and vanish on restart.
One ``EntityStore`` is owned by each application instance; tests build
their own isolated stores.

Because sessions share that single connection, a commit on one session
would also commit whatever another session has flushed.  ``session()``
therefore holds a lock for the whole unit of work: units of work run one
at a time and a failed one rolls back only its own writes.
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncIterator, Optional

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool


def utcnow() -> datetime:
    """Naive UTC timestamp (SQLite keeps no timezone information)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Base(DeclarativeBase):
    """Shared declarative base for all ORM models."""


def _is_memory_url(url: str) -> bool:
    return url.startswith("sqlite") and (":memory:" in url or url.endswith("://"))


class EntityStore:
    """Owns the engine and session factory for one application instance."""

    def __init__(self, database_url: str = "sqlite+aiosqlite:///:memory:"):
        kwargs: dict = {"echo": False}
        if _is_memory_url(database_url):
            kwargs["poolclass"] = StaticPool
            kwargs["connect_args"] = {"check_same_thread": False}
        self.database_url = database_url
        self.engine: AsyncEngine = create_async_engine(database_url, **kwargs)
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        self._lock: Optional[asyncio.Lock] = None

    async def create_all(self) -> None:
        # models must be imported so their tables are registered on Base
        from . import models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def drop_all(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)

    async def dispose(self) -> None:
        await self.engine.dispose()

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """Unit of work: commit on success, rollback on error.

        Units of work are serialized; do not open a second one while
        holding the first.
        """
        if self._lock is None:
            self._lock = asyncio.Lock()
        async with self._lock:
            async with self.session_factory() as session:
                try:
                    yield session
                    await session.commit()
                except Exception:
                    await session.rollback()
                    raise

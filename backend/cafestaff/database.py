"""
CafeStaff Backend — Database Client
=====================================

What:  Async SQLAlchemy engine + session factory wrapped in an explicit
       `Database` object, plus the declarative Base for all models.
Why:   Services receive the store handle they operate on instead of
       importing a module-level engine. The application lifespan opens it
       at startup and disposes it at shutdown; tests build their own.
How:   `transaction()` yields a session that commits when the block exits
       cleanly and rolls back on any exception. `session()` yields a plain
       session for read-only work.

Connection Pooling Strategy (PostgreSQL):
    pool_size=10, max_overflow=5, pool_pre_ping, pool_recycle=3600.
    SQLite (tests, local dev) uses SQLAlchemy's default pool and gets
    foreign key enforcement switched on per connection.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import Request
from sqlalchemy import event, text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from cafestaff.config import settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Shares a single metadata object between the models, `create_all()` and
    Alembic's autogenerate.
    """
    pass


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    # SQLite ships with foreign key checks off for every new connection
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    """
    Owns the engine and session factory for one database URL.

    Lifecycle:
        db = Database(settings.database_url)   # at startup
        async with db.transaction() as session:
            ...                                 # per operation
        await db.dispose()                      # at shutdown
    """

    def __init__(self, url: Optional[str] = None, echo: Optional[bool] = None):
        self.url = url or settings.database_url
        is_sqlite = self.url.startswith("sqlite")

        engine_kwargs = {
            # SQL logging is noisy; only useful during development
            "echo": settings.log_level == "DEBUG" if echo is None else echo,
        }
        if not is_sqlite:
            engine_kwargs.update(
                pool_size=settings.db_pool_size,
                max_overflow=settings.db_max_overflow,
                pool_pre_ping=settings.db_pool_pre_ping,
                pool_recycle=3600,
            )

        self.engine: AsyncEngine = create_async_engine(self.url, **engine_kwargs)
        if is_sqlite:
            event.listen(self.engine.sync_engine, "connect", _enable_sqlite_foreign_keys)

        # expire_on_commit=False: objects stay readable after the transaction
        # closes, which is when services build their response models
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Plain session for reads. Nothing is committed."""
        async with self.session_factory() as session:
            yield session

    @asynccontextmanager
    async def transaction(self) -> AsyncGenerator[AsyncSession, None]:
        """
        Session wrapped in a single transaction.

        How it works:
            1. Creates a new session from the factory
            2. Yields it to the caller, which performs its writes
            3. On success: commits every write at once
            4. On error: rolls back every write and re-raises
            5. Always: closes the session (returns connection to pool)

        Example:
            async with database.transaction() as session:
                session.add(cafe)
                await session.execute(delete(Assignment)...)
        """
        async with self.session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                # Any failure, including non-DB errors raised by the caller,
                # discards the whole unit of work
                await session.rollback()
                raise
            finally:
                await session.close()

    async def create_all(self) -> None:
        """Create missing tables (tests and local development)."""
        # Registers the model classes on Base.metadata
        from cafestaff import models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables ensured")

    async def ping(self) -> None:
        """Round-trip a trivial query; raises if the database is unreachable."""
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

    async def dispose(self) -> None:
        """Close every pooled connection (application shutdown)."""
        await self.engine.dispose()


# ── FastAPI Dependency ────────────────────────────────────────────────────
def get_database(request: Request) -> Database:
    """Returns the Database opened by the application lifespan."""
    return request.app.state.database

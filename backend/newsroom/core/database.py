"""
Database configuration and session management.

Provides SQLAlchemy async engine setup, session factory, and dependency
injection for database sessions in FastAPI routes.
"""

import asyncio
import os
from pathlib import Path
from typing import AsyncGenerator

from sqlalchemy import event, text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    AsyncEngine,
    create_async_engine,
    async_sessionmaker,
)
from sqlalchemy.pool import StaticPool

from newsroom.core.config import settings
from newsroom.core.logging_config import get_logger
from newsroom.models.base import Base

logger = get_logger(__name__)


def get_async_engine() -> AsyncEngine:
    """
    Create and configure the async SQLAlchemy engine.

    For SQLite:
    - Uses StaticPool (single file or in-memory database)
    - Enables check_same_thread=False for async compatibility
    - Turns on foreign key enforcement

    Returns:
        Configured AsyncEngine instance
    """
    is_sqlite = "sqlite" in settings.database_url

    connect_args: dict = {"check_same_thread": False} if is_sqlite else {}

    engine_kwargs = {
        "echo": False,
        "future": True,
        "connect_args": connect_args,
    }

    if is_sqlite:
        engine_kwargs["poolclass"] = StaticPool

    engine = create_async_engine(
        settings.database_url,
        **engine_kwargs,
    )

    if is_sqlite:
        @event.listens_for(engine.sync_engine, "connect")
        def _set_sqlite_pragma(dbapi_connection, connection_record):  # noqa: ANN001
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return engine


# Global async engine instance
engine = get_async_engine()


async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)


async def init_db() -> None:
    """
    Initialize the database.

    Creates tables when ENABLE_DB_CREATE_ALL is set, or always for SQLite
    (there is no migration tooling for the file database).

    Raises:
        Any connectivity error. A store that cannot be reached at start-up
        is fatal and must abort the process.
    """
    from newsroom import models  # noqa: F401

    is_sqlite = "sqlite" in settings.database_url
    create_all = os.getenv("ENABLE_DB_CREATE_ALL", "").lower() in {"1", "true", "yes"}

    if is_sqlite:
        database = make_url(settings.database_url).database
        if database and database != ":memory:":
            Path(database).parent.mkdir(parents=True, exist_ok=True)

    async with engine.begin() as conn:
        if is_sqlite or create_all:
            await conn.run_sync(Base.metadata.create_all)
        await conn.execute(text("SELECT 1"))

    logger.info("Database initialized", extra={"create_all": is_sqlite or create_all})


async def close_db() -> None:
    """Dispose the engine and close pooled connections at shutdown."""
    await engine.dispose()


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency function to get database session.

    Commits when the request handler returns normally and rolls back when
    it raises, so a domain error never leaves a half-applied update.

    Example:
        @router.get("/items")
        async def get_items(db: AsyncSession = Depends(get_db)):
            result = await db.execute(select(Item))
            return result.scalars().all()
    """
    async with async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def check_database(timeout_seconds: float = 2.0) -> bool:
    """
    Check database connectivity with a ``SELECT 1``.

    Returns:
        True if the database answered within the timeout, False otherwise
    """
    try:
        async with asyncio.timeout(timeout_seconds):
            async with async_session_maker() as session:
                result = await session.execute(text("SELECT 1"))
                result.scalar()
                return True
    except asyncio.TimeoutError:
        logger.warning("Database probe timed out", extra={"timeout_seconds": timeout_seconds})
        return False
    except Exception as exc:
        logger.warning("Database probe failed", extra={"error": str(exc)})
        return False

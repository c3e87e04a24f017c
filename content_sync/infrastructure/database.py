"""Database Session Manager — one engine plus the session scope every command runs in.

Invariants:
    - A session that exits with an exception is rolled back before it is closed
    - SQLAlchemy failures leave the scope as DatabaseError (core/errors.py);
      domain errors pass through untouched so routes keep their status codes
    - Worker managers use NullPool: every actor call runs on its own event loop
      and asyncpg connections cannot cross loops

Design Decisions:
    - The API singleton is built by the FastAPI lifespan, never at import time
    - expire_on_commit=False: committed editions are read again to build responses
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.exc import (
    DBAPIError, IntegrityError, OperationalError, SQLAlchemyError,
)
from sqlalchemy.ext.asyncio import (
    AsyncSession, async_sessionmaker, create_async_engine,
)
from sqlalchemy.pool import NullPool

from content_sync.core.errors import DatabaseError

logger = logging.getLogger(__name__)

# First match wins, so subclasses come before SQLAlchemyError.
_FAILURE_KINDS: tuple[tuple[type[SQLAlchemyError], str, str], ...] = (
    (IntegrityError, "Integrity constraint violated", "commit"),
    (OperationalError, "Connection or operational error", "execute"),
    (DBAPIError, "Database driver error", "query"),
    (SQLAlchemyError, "Database operation failed", "unknown"),
)


def to_database_error(exc: SQLAlchemyError) -> DatabaseError:
    for kind, message, operation in _FAILURE_KINDS:
        if isinstance(exc, kind):
            return DatabaseError(message, operation)
    return DatabaseError("Database operation failed", "unknown")


class DatabaseSessionManager:
    """Owns the async engine and hands out rollback-on-error sessions."""

    def __init__(
        self,
        database_url: str,
        pool_size: int = 20,
        max_overflow: int = 10,
        null_pool: bool = False,
    ):
        if null_pool:
            engine_kwargs = {"poolclass": NullPool}
        elif database_url.startswith("sqlite"):
            engine_kwargs = {"pool_pre_ping": True}
        else:
            engine_kwargs = {
                "pool_pre_ping": True,
                "pool_size": pool_size,
                "max_overflow": max_overflow,
                "pool_recycle": 3600,
            }
        self.engine = create_async_engine(database_url, **engine_kwargs)
        self._session_factory = async_sessionmaker(
            self.engine, class_=AsyncSession, expire_on_commit=False,
        )

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        session = self._session_factory()
        try:
            yield session
        except SQLAlchemyError as e:
            await session.rollback()
            error = to_database_error(e)
            logger.error(
                "database failure during %s: %s", error.operation, e,
            )
            raise error from e
        except BaseException:
            await session.rollback()
            raise
        finally:
            await session.close()

    async def ping(self) -> bool:
        """True when a trivial query round-trips; used by the readiness probe."""
        try:
            async with self.session() as db:
                await db.execute(text("SELECT 1"))
        except DatabaseError:
            return False
        return True

    async def dispose(self) -> None:
        await self.engine.dispose()


db_manager: DatabaseSessionManager | None = None


def init_db(database_url: str, **kwargs) -> DatabaseSessionManager:
    global db_manager
    db_manager = DatabaseSessionManager(database_url, **kwargs)
    return db_manager


def get_db_manager() -> DatabaseSessionManager:
    if db_manager is None:
        raise RuntimeError("Database not initialized")
    return db_manager


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: one session per request."""
    async with get_db_manager().session() as session:
        yield session

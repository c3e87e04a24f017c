"""Database Session Manager — error mapping and rollback behaviour.

Tests cover:
    - SQLAlchemy failures leave the session scope as DatabaseError
    - Domain errors pass through unchanged
    - ping() reports a reachable database
"""

import pytest
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from content_sync.core.errors import DatabaseError, ValidationError
from content_sync.infrastructure.database import (
    DatabaseSessionManager, to_database_error,
)


@pytest.fixture
async def manager():
    m = DatabaseSessionManager("sqlite+aiosqlite:///:memory:")
    yield m
    await m.dispose()


async def test_bad_statement_becomes_database_error(manager):
    with pytest.raises(DatabaseError) as exc_info:
        async with manager.session() as db:
            await db.execute(text("SELECT * FROM no_such_table"))

    assert exc_info.value.operation == "execute"
    assert exc_info.value.http_status == 503


async def test_domain_errors_are_not_wrapped(manager):
    with pytest.raises(ValidationError):
        async with manager.session():
            raise ValidationError("bad", {"title": ["is required"]})


async def test_ping(manager):
    assert await manager.ping() is True


def test_integrity_failures_map_to_commit():
    error = to_database_error(IntegrityError("INSERT", {}, Exception("dup")))
    assert error.operation == "commit"
    assert to_database_error(SQLAlchemyError("x")).operation == "unknown"

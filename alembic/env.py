"""Alembic environment for content-sync migrations.

The target URL comes from content_sync.config.Settings, so migrations and the
running service always agree on the database (including the postgresql://
to postgresql+asyncpg:// rewrite). `alembic -x url=...` overrides it for one run;
the sqlalchemy.url in alembic.ini is ignored.
"""

import asyncio
from logging.config import fileConfig

from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import NullPool

from alembic import context

import content_sync.models  # noqa: F401  (registers tables on Base.metadata)
from content_sync.config import get_settings
from content_sync.db.base import Base

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)


def target_url() -> str:
    override = context.get_x_argument(as_dictionary=True).get("url")
    return override or get_settings().database_url


def configure(**kwargs) -> None:
    context.configure(
        target_metadata=Base.metadata,
        compare_type=True,
        render_as_batch=target_url().startswith("sqlite"),
        **kwargs,
    )


def run_offline() -> None:
    """Emit SQL to stdout without connecting."""
    configure(
        url=target_url(),
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def _migrate(connection: Connection) -> None:
    configure(connection=connection)
    with context.begin_transaction():
        context.run_migrations()


async def run_online() -> None:
    engine = create_async_engine(target_url(), poolclass=NullPool)
    try:
        async with engine.connect() as connection:
            await connection.run_sync(_migrate)
    finally:
        await engine.dispose()


if context.is_offline_mode():
    run_offline()
else:
    asyncio.run(run_online())

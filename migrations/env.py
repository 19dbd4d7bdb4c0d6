"""Alembic environment for the CoreTax schema.

The database URL comes from ``Settings.database_config`` rather than
``alembic.ini``, and importing ``coretax.infrastructure.database.models``
registers every table on ``Base.metadata`` for autogenerate.
"""

import asyncio
from typing import Any

from alembic import context
from loguru import logger
from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import async_engine_from_config

import coretax.infrastructure.database.models  # noqa: F401
from coretax.core.config import get_settings
from coretax.infrastructure.database.base import Base

config = context.config
target_metadata = Base.metadata

COMPARE_OPTIONS: dict[str, Any] = {
    "compare_type": True,
    "compare_server_default": True,
}


def run_migrations_offline() -> None:
    """Emit SQL to stdout without connecting."""
    logger.info("Running migrations in offline mode")
    context.configure(
        url=get_settings().database_config.database_url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **COMPARE_OPTIONS,
    )
    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection: Connection) -> None:
    context.configure(
        connection=connection, target_metadata=target_metadata, **COMPARE_OPTIONS
    )
    with context.begin_transaction():
        context.run_migrations()


async def run_async_migrations() -> None:
    """Apply migrations over an asyncpg connection."""
    db_config = get_settings().database_config
    logger.info("Running migrations in online mode")

    # NullPool: a migration run needs exactly one connection
    connectable = async_engine_from_config(
        {
            "sqlalchemy.url": db_config.database_url,
            "sqlalchemy.echo": db_config.echo,
        },
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    async with connectable.connect() as connection:
        await connection.run_sync(do_run_migrations)
    await connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_async_migrations())

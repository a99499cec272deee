"""Alembic environment for the control-plane (admin) database.

Tenant databases are not migrated from here; their schema is created by
``seed_tenant.py``.
"""

import asyncio
import sys
from logging.config import fileConfig

from sqlalchemy import pool
from sqlalchemy.ext.asyncio import create_async_engine

from alembic import context

# Import our database configuration
import config
from db import AdminBase

# Import admin models so Alembic can detect them
from models.tenant import Tenant  # noqa: F401

# this is the Alembic Config object, which provides
# access to the values within the .ini file in use.
alembic_config = context.config

# Interpret the config file for Python logging.
# This line sets up loggers basically.
if alembic_config.config_file_name is not None:
    fileConfig(alembic_config.config_file_name)

# Set the database URL from our config
alembic_config.set_main_option("sqlalchemy.url", config.settings.ADMIN_DATABASE_URL)

# Use the admin metadata for autogenerate support
target_metadata = AdminBase.metadata


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode.

    This configures the context with just a URL
    and not an Engine. Calls to context.execute() here emit the given
    string to the script output.
    """
    url = alembic_config.get_main_option("sqlalchemy.url")
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Run migrations in 'online' mode against an async engine."""
    connectable = create_async_engine(
        alembic_config.get_main_option("sqlalchemy.url"),
        poolclass=pool.NullPool,
    )

    async def run_async_migrations():
        async with connectable.connect() as connection:
            await connection.run_sync(
                lambda sync_conn: context.configure(
                    connection=sync_conn, target_metadata=target_metadata
                )
            )
            async with connection.begin():
                await connection.run_sync(lambda sync_conn: context.run_migrations())
        await connectable.dispose()

    # On Windows, use SelectorEventLoop for psycopg compatibility
    if sys.platform == "win32":
        asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

    asyncio.run(run_async_migrations())


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()

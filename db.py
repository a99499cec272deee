"""Database configuration and session management.

Two schemas live in this application:

- ``AdminBase``: the control-plane database (tenant registry), reached through
  the single long-lived ``engine`` below.
- ``TenantBase``: the per-tenant schema (users, roles, permissions). Tenant
  engines are never created here; they are handed out by
  ``tenant_pool.TenantConnectionPool``.
"""

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

import config

# Create async engine for the admin directory
engine = create_async_engine(
    config.settings.ADMIN_DATABASE_URL,
    echo=False,  # Set to True for SQL query logging
    pool_pre_ping=True,
)

# Create async session factory
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)

# Base class for control-plane models
AdminBase = declarative_base()

# Base class for models stored in every tenant database
TenantBase = declarative_base()


async def get_db() -> AsyncSession:
    """
    Dependency function to get an admin database session.

    Yields:
        AsyncSession: Admin directory session
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()


def tenant_sessionmaker(tenant_engine) -> async_sessionmaker:
    """Build a session factory bound to a pooled tenant engine."""
    return async_sessionmaker(
        tenant_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


async def init_db() -> None:
    """
    Initialize the admin database (create tables).
    This should be called on application startup.
    """
    async with engine.begin() as conn:
        await conn.run_sync(AdminBase.metadata.create_all)


async def close_db() -> None:
    """
    Close admin database connections.
    This should be called on application shutdown.
    """
    await engine.dispose()

"""Pytest configuration and fixtures."""

import os

# Test settings must be in place before application modules read them
os.environ.setdefault("ADMIN_DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

import models  # noqa: F401
from api.deps import get_db
from auth.jwt import issue_token
from auth.schemas import IdentityClaims
from db import AdminBase, tenant_sessionmaker
from main import app
from models.tenant import Tenant
from seed_tenant import seed_tenant
from tenant_pool import TenantConnectionPool

TEST_PASSWORD = "s3cret-pass"


@pytest_asyncio.fixture(scope="function")
async def admin_engine(tmp_path):
    """Control-plane database backed by a SQLite file."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'admin.db'}", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(AdminBase.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def admin_sessionmaker(admin_engine):
    return async_sessionmaker(admin_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture(scope="function")
async def db_session(admin_sessionmaker):
    """Create an admin database session."""
    async with admin_sessionmaker() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture
async def tenant_db_url(tmp_path):
    """URL of a seeded tenant database for the ``acme.com`` domain."""
    url = f"sqlite+aiosqlite:///{tmp_path / 'acme.db'}"
    engine = create_async_engine(url)
    try:
        await seed_tenant(engine, "acme.com", password=TEST_PASSWORD)
    finally:
        await engine.dispose()
    return url


@pytest_asyncio.fixture
async def tenant_session(tenant_db_url):
    """Session on the seeded tenant database."""
    engine = create_async_engine(tenant_db_url)
    async with tenant_sessionmaker(engine)() as session:
        yield session
    await engine.dispose()


@pytest_asyncio.fixture
async def acme_tenant(db_session, tenant_db_url):
    """Active tenant whose code matches ``@acme.com`` emails."""
    tenant = Tenant(
        name="Acme College",
        code="acme",
        connection_string=tenant_db_url,
        is_active=True,
    )
    db_session.add(tenant)
    await db_session.commit()
    await db_session.refresh(tenant)
    return tenant


@pytest_asyncio.fixture
async def inactive_tenant(db_session, tmp_path):
    """Deactivated tenant (code ``closed``)."""
    tenant = Tenant(
        name="Closed College",
        code="closed",
        connection_string=f"sqlite+aiosqlite:///{tmp_path / 'closed.db'}",
        is_active=False,
    )
    db_session.add(tenant)
    await db_session.commit()
    await db_session.refresh(tenant)
    return tenant


@pytest_asyncio.fixture
async def misconfigured_tenant(db_session):
    """Active tenant (code ``broken``) whose connection string cannot be parsed."""
    tenant = Tenant(
        name="Broken College",
        code="broken",
        connection_string="notaurl",
        is_active=True,
    )
    db_session.add(tenant)
    await db_session.commit()
    await db_session.refresh(tenant)
    return tenant


@pytest_asyncio.fixture
async def tenant_pool():
    """Real pool creating SQLite engines; closed after the test."""
    pool = TenantConnectionPool(max_connections_per_tenant=5)
    yield pool
    await pool.shutdown()


@pytest_asyncio.fixture
async def client(admin_sessionmaker, tenant_pool):
    """HTTP client bound to the app with test databases and pool."""

    async def _get_db():
        async with admin_sessionmaker() as session:
            yield session

    app.dependency_overrides[get_db] = _get_db
    app.state.tenant_pool = tenant_pool

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
    del app.state.tenant_pool


@pytest.fixture
def auth_headers():
    """Factory function to create Authorization headers from a token."""
    def _create_headers(token: str) -> dict:
        return {"Authorization": f"Bearer {token}"}
    return _create_headers


@pytest.fixture
def token_factory():
    """Factory function to create JWT tokens for testing."""
    def _create_token(user_id=1, role_id=1, tenant_id=None, is_super_admin=False, expires_in=None):
        claims = IdentityClaims(
            user_id=user_id,
            role_id=role_id,
            tenant_id=tenant_id,
            is_super_admin=is_super_admin,
        )
        return issue_token(claims, expires_in)
    return _create_token


@pytest.fixture
def tenant_password():
    """Password of every user seeded into the acme tenant."""
    return TEST_PASSWORD

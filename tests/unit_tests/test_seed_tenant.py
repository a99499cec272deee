"""Unit tests for tenant database seeding."""

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import create_async_engine

from auth.passwords import verify_password
from auth.permissions import ALL_PERMISSIONS, STUDENT_ROLE
from db import tenant_sessionmaker
from models.permission import Permission, RolePermission
from models.user import User
from repos import permissions_repo, users_repo
from seed_tenant import seed_credentials, seed_permissions, seed_tenant


async def _count(session, model) -> int:
    result = await session.execute(select(func.count()).select_from(model))
    return result.scalar_one()


@pytest.mark.asyncio
async def test_seeded_tenant_has_catalogue_roles_and_users(tenant_session, tenant_password):
    assert await _count(tenant_session, Permission) == len(ALL_PERMISSIONS)

    admin = await users_repo.get_by_email(tenant_session, "admin@acme.com")
    user = await users_repo.get_by_email(tenant_session, "user@acme.com")

    assert admin.is_super_admin is True
    assert admin.role.name == "ADMIN"
    assert user.is_super_admin is False
    assert user.role.name == STUDENT_ROLE
    assert verify_password(tenant_password, user.password_hash)


@pytest.mark.asyncio
async def test_seeding_twice_adds_nothing(tmp_path):
    """Test: Re-running the seeder leaves an already seeded tenant unchanged."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'twice.db'}")
    try:
        await seed_tenant(engine, "twice.edu", password="pw")
        await seed_tenant(engine, "twice.edu", password="pw")

        async with tenant_sessionmaker(engine)() as session:
            assert await _count(session, Permission) == len(ALL_PERMISSIONS)
            assert await _count(session, User) == 2
            grants = await _count(session, RolePermission)

            assert await seed_permissions(session) == 0
            assert await seed_credentials(session, "twice.edu", password="pw") == []
            assert await _count(session, RolePermission) == grants
    finally:
        await engine.dispose()


@pytest.mark.asyncio
async def test_seed_permissions_inserts_only_missing(tenant_session):
    inserted = await seed_permissions(tenant_session, [*ALL_PERMISSIONS, "LMS_BADGES_VIEW"])

    assert inserted == 1
    assert await permissions_repo.get_permission_by_name(tenant_session, "LMS_BADGES_VIEW")

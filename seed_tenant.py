"""Create the schema of a tenant database and seed its permissions and users.

Usage:
    python seed_tenant.py <tenant_database_url> <email_domain>

Example:
    python seed_tenant.py postgresql+psycopg://user:pw@localhost:5432/lms_acme acme.com
"""

import asyncio
import logging
import sys

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

import logging_config
from auth.passwords import hash_password
from auth.permissions import ADMIN_ROLE, ALL_PERMISSIONS, DEFAULT_ROLE_GRANTS, STUDENT_ROLE
from db import TenantBase, tenant_sessionmaker
from models.permission import Permission
from models.user import User
from repos import permissions_repo, users_repo

logger = logging.getLogger(__name__)

DEFAULT_PASSWORD = "root"


async def create_tenant_schema(engine: AsyncEngine) -> None:
    """Create all tenant tables that do not exist yet."""
    async with engine.begin() as conn:
        await conn.run_sync(TenantBase.metadata.create_all)


async def seed_permissions(session, names: list[str] | None = None) -> int:
    """
    Insert the permissions that are missing from the catalogue.

    Returns:
        Number of permissions inserted
    """
    names = names if names is not None else ALL_PERMISSIONS

    result = await session.execute(select(Permission.name).where(Permission.name.in_(names)))
    existing = set(result.scalars().all())
    missing = [name for name in names if name not in existing]

    if not missing:
        logger.info("No new permissions to seed")
        return 0

    session.add_all([Permission(name=name) for name in missing])
    await session.flush()
    logger.info("Seeded %d new permissions", len(missing))
    return len(missing)


async def seed_role_grants(session, grants: dict[str, list[str]] | None = None) -> None:
    """Ensure each role exists and holds its default permissions."""
    grants = grants if grants is not None else DEFAULT_ROLE_GRANTS

    for role_name, permission_names in grants.items():
        role = await permissions_repo.get_or_create_role(session, role_name)
        for permission_name in permission_names:
            permission = await permissions_repo.get_permission_by_name(session, permission_name)
            if permission is None:
                raise ValueError(f"Permission {permission_name} is not seeded")
            await permissions_repo.grant(session, role_id=role.id, permission_id=permission.id)


async def seed_credentials(session, domain: str, password: str = DEFAULT_PASSWORD) -> list[User]:
    """
    Ensure an admin (super-admin) and a normal user exist for ``domain``.

    Returns:
        Users created by this call
    """
    admin_role = await permissions_repo.get_or_create_role(session, ADMIN_ROLE)
    student_role = await permissions_repo.get_or_create_role(session, STUDENT_ROLE)

    wanted = [
        ("Admin", f"admin@{domain}", admin_role.id, True),
        ("User", f"user@{domain}", student_role.id, False),
    ]

    created = []
    for name, email, role_id, is_super_admin in wanted:
        if await users_repo.get_by_email(session, email) is not None:
            logger.info("User already exists: %s", email)
            continue

        user = await users_repo.create(
            session,
            User(
                name=name,
                email=email,
                password_hash=hash_password(password),
                role_id=role_id,
                is_super_admin=is_super_admin,
            ),
        )
        logger.info("Seeded user: %s", email)
        created.append(user)

    return created


async def seed_tenant(engine: AsyncEngine, domain: str, password: str = DEFAULT_PASSWORD) -> None:
    """Create the schema and seed permissions, roles and users in one transaction."""
    await create_tenant_schema(engine)

    async with tenant_sessionmaker(engine)() as session:
        await seed_permissions(session)
        await seed_role_grants(session)
        await seed_credentials(session, domain, password)
        await session.commit()


async def main(database_url: str, domain: str) -> None:
    engine = create_async_engine(database_url)
    try:
        await seed_tenant(engine, domain)
    finally:
        await engine.dispose()


if __name__ == "__main__":
    logging_config.setup_logging()

    if len(sys.argv) != 3:
        print(__doc__)
        sys.exit(1)

    # Fix for Windows asyncio
    if sys.platform == "win32":
        asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())
    asyncio.run(main(sys.argv[1], sys.argv[2]))

"""Repository for roles, permissions and role grants (tenant database)."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from models.permission import Permission, RolePermission
from models.role import Role


async def get_permission_by_name(session: AsyncSession, name: str) -> Permission | None:
    result = await session.execute(select(Permission).where(Permission.name == name))
    return result.scalar_one_or_none()


async def has_grant(session: AsyncSession, *, role_id: int, permission_name: str) -> bool:
    """
    Check whether a role is granted a named permission.

    Args:
        session: Tenant database session
        role_id: Role to check
        permission_name: Exact permission name

    Returns:
        True if a (role, permission) grant row exists
    """
    result = await session.execute(
        select(RolePermission.id)
        .join(Permission, RolePermission.permission_id == Permission.id)
        .where(
            RolePermission.role_id == role_id,
            Permission.name == permission_name,
        )
        .limit(1)
    )
    return result.scalar_one_or_none() is not None


async def list_names(session: AsyncSession, *, prefix: str = "") -> list[str]:
    """List every permission name starting with ``prefix``."""
    result = await session.execute(
        select(Permission.name)
        .where(Permission.name.startswith(prefix))
        .order_by(Permission.name)
    )
    return list(result.scalars().all())


async def list_names_for_role(session: AsyncSession, *, role_id: int, prefix: str = "") -> list[str]:
    """List permission names granted to a role, filtered by ``prefix``."""
    result = await session.execute(
        select(Permission.name)
        .join(RolePermission, RolePermission.permission_id == Permission.id)
        .where(
            RolePermission.role_id == role_id,
            Permission.name.startswith(prefix),
        )
        .order_by(Permission.name)
    )
    return list(result.scalars().all())


async def get_role_by_name(session: AsyncSession, name: str) -> Role | None:
    result = await session.execute(select(Role).where(Role.name == name))
    return result.scalar_one_or_none()


async def get_or_create_role(session: AsyncSession, name: str) -> Role:
    """Return the role called ``name``, creating it if missing."""
    role = await get_role_by_name(session, name)
    if role is None:
        role = Role(name=name)
        session.add(role)
        await session.flush()
    return role


async def grant(session: AsyncSession, *, role_id: int, permission_id: int) -> None:
    """Grant a permission to a role if not already granted."""
    result = await session.execute(
        select(RolePermission.id).where(
            RolePermission.role_id == role_id,
            RolePermission.permission_id == permission_id,
        )
    )
    if result.scalar_one_or_none() is None:
        session.add(RolePermission(role_id=role_id, permission_id=permission_id))
        await session.flush()

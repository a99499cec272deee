"""Repository for the admin directory (tenant registry)."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from models.tenant import Tenant


async def get_by_code(session: AsyncSession, code: str) -> Tenant | None:
    """
    Get a tenant by its unique short code, regardless of status.

    Args:
        session: Admin database session
        code: Tenant short code (email domain label)

    Returns:
        Tenant if found, None otherwise
    """
    result = await session.execute(select(Tenant).where(Tenant.code == code))
    return result.scalar_one_or_none()


async def get_active_by_id(session: AsyncSession, tenant_id: int) -> Tenant | None:
    """
    Get an active tenant by ID.

    Args:
        session: Admin database session
        tenant_id: Tenant ID taken from verified token claims

    Returns:
        Tenant if it exists and is active, None otherwise
    """
    result = await session.execute(
        select(Tenant).where(
            Tenant.id == tenant_id,
            Tenant.is_active.is_(True),
        )
    )
    return result.scalar_one_or_none()

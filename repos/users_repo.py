"""Repository for User database operations (tenant database)."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from models.user import User


async def get_by_email(session: AsyncSession, email: str) -> User | None:
    """Get a user by email with its role loaded."""
    result = await session.execute(
        select(User).options(selectinload(User.role)).where(User.email == email)
    )
    return result.scalar_one_or_none()


async def create(session: AsyncSession, user: User) -> User:
    session.add(user)
    await session.flush()
    return user

"""Authentication endpoints."""

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, EmailStr, Field
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import get_db, get_tenant_pool
from api.responses import envelope
from services import auth_service
from tenant_pool import TenantConnectionPool

router = APIRouter(prefix="/auth")


class LoginRequest(BaseModel):
    """Request schema for login."""

    email: EmailStr
    password: str = Field(min_length=1)


@router.post("/login")
async def login(
    request: LoginRequest,
    db: AsyncSession = Depends(get_db),
    pool: TenantConnectionPool = Depends(get_tenant_pool),
):
    """
    Log a user in to the tenant selected by its email domain.

    ``admin@acme.com`` authenticates against the tenant whose code is ``acme``.

    Returns:
        Envelope whose data is ``{token, permissions, role, tenant}``
    """
    result = await auth_service.login(
        db,
        pool,
        email=request.email,
        password=request.password,
    )
    return envelope(data=result, message="Login successful", status_code=status.HTTP_200_OK)

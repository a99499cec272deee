"""FastAPI dependencies for authentication, tenancy and authorization.

Dependencies chain in the order a request is processed:

    get_identity -> get_tenancy_context -> require_permission(...)
"""

from collections.abc import AsyncIterator

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from api.tenancy import TenancyContext, resolve_tenant
from auth.jwt import verify_token
from auth.schemas import IdentityClaims
from db import get_db as get_db_session
from db import tenant_sessionmaker
from errors import UnauthenticatedError
from services import permissions_service
from tenant_pool import TenantConnectionPool

# HTTP Bearer token security scheme; missing headers are reported by get_identity
security = HTTPBearer(auto_error=False)


async def get_db() -> AsyncIterator[AsyncSession]:
    """
    Dependency to get an admin directory session.
    Reuses the get_db function from db.py.
    """
    async for session in get_db_session():
        yield session


def get_tenant_pool(request: Request) -> TenantConnectionPool:
    """The application-owned tenant pool (created in main.lifespan)."""
    return request.app.state.tenant_pool


async def get_identity(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> IdentityClaims:
    """
    Dependency to get the caller's identity from the bearer token.

    Raises:
        UnauthenticatedError: Header missing or malformed, token invalid or expired
    """
    if credentials is None or not credentials.credentials:
        raise UnauthenticatedError(
            "No token provided. Authorization header must be in format: Bearer <token>"
        )

    return verify_token(credentials.credentials)


async def get_tenancy_context(
    identity: IdentityClaims = Depends(get_identity),
    db: AsyncSession = Depends(get_db),
    pool: TenantConnectionPool = Depends(get_tenant_pool),
) -> TenancyContext:
    """Dependency resolving the caller's tenant and pooled connection."""
    return await resolve_tenant(identity, db, pool)


async def get_tenant_db(
    tenancy: TenancyContext = Depends(get_tenancy_context),
) -> AsyncIterator[AsyncSession]:
    """
    Dependency to get a session on the caller's tenant database.

    The session is closed after the request; the pooled engine stays open.
    """
    async with tenant_sessionmaker(tenancy.engine)() as session:
        yield session


def require_permission(permission: str):
    """
    Build a dependency that admits only callers holding ``permission``.

    Usage:
        @router.get("/rewards", dependencies=[Depends(require_permission("LMS_REWARDS_VIEW"))])

    Returns:
        Dependency returning the caller's TenancyContext when allowed
    """

    async def _require_permission(
        tenancy: TenancyContext = Depends(get_tenancy_context),
        session: AsyncSession = Depends(get_tenant_db),
    ) -> TenancyContext:
        await permissions_service.authorize(
            session,
            identity=tenancy.identity,
            permission=permission,
        )
        return tenancy

    _require_permission.__name__ = f"require_permission_{permission.lower()}"
    return _require_permission

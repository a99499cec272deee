"""Tenancy context and tenant resolution."""

import logging
from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from auth.schemas import IdentityClaims
from errors import ForbiddenError, InternalError, UnauthenticatedError
from models.tenant import TenantResponse
from repos import tenants_repo
from tenant_pool import TenantConnectionPool

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TenancyContext:
    """Per-request context for tenant-scoped operations.

    Attributes:
        identity: Verified token claims of the caller
        tenant: Resolved tenant (id, name, code)
        engine: Pooled tenant engine; borrowed, never disposed by handlers
    """

    identity: IdentityClaims
    tenant: TenantResponse
    engine: AsyncEngine

    @property
    def tenant_id(self) -> int:
        return self.tenant.id


async def resolve_tenant(
    identity: IdentityClaims,
    admin_db: AsyncSession,
    pool: TenantConnectionPool,
) -> TenancyContext:
    """
    Resolve the caller's tenant and borrow a pooled connection for it.

    Args:
        identity: Verified token claims
        admin_db: Admin directory session
        pool: Tenant connection pool

    Returns:
        TenancyContext for downstream dependencies

    Raises:
        UnauthenticatedError: Token carries no tenant
        ForbiddenError: Tenant unknown or inactive
        InternalError: Directory lookup failed or tenant database unavailable
    """
    if not identity.tenant_id:
        raise UnauthenticatedError("Tenant ID not found in token")

    try:
        tenant = await tenants_repo.get_active_by_id(admin_db, identity.tenant_id)
    except SQLAlchemyError as e:
        logger.error("Tenant validation error for tenant %s: %s", identity.tenant_id, e)
        raise InternalError("Failed to validate tenant") from e

    if tenant is None:
        logger.warning(
            "User %s presented unknown or inactive tenant %s",
            identity.user_id,
            identity.tenant_id,
        )
        raise ForbiddenError("Tenant not found or inactive")

    try:
        engine = await pool.acquire(tenant.connection_string, tenant.id)
    except SQLAlchemyError as e:
        logger.error("Tenant database unavailable for tenant %s: %s", tenant.id, e)
        raise InternalError("Tenant database not available") from e

    return TenancyContext(
        identity=identity,
        tenant=TenantResponse.model_validate(tenant),
        engine=engine,
    )

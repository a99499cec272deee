"""Tenant pool statistics endpoint."""

from fastapi import APIRouter, Depends

from api.deps import get_tenant_pool, require_permission
from api.responses import envelope
from auth.permissions import TENANT_POOL_VIEW
from tenant_pool import TenantConnectionPool

router = APIRouter(prefix="/admin")


@router.get(
    "/tenant-pool",
    dependencies=[Depends(require_permission(TENANT_POOL_VIEW))],
)
async def tenant_pool_stats(pool: TenantConnectionPool = Depends(get_tenant_pool)):
    """Live handle counts per tenant database (passwords masked)."""
    return envelope(data=pool.stats(), message="Tenant pool statistics")

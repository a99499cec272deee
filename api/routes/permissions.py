"""Permission check endpoint."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import get_tenancy_context, get_tenant_db
from api.responses import envelope
from api.tenancy import TenancyContext
from services import permissions_service

router = APIRouter(prefix="/permission")


@router.get("/has-permission/{permission}")
async def has_permission(
    permission: str,
    tenancy: TenancyContext = Depends(get_tenancy_context),
    session: AsyncSession = Depends(get_tenant_db),
):
    """
    Check whether the caller holds ``permission`` in its tenant.

    Returns:
        Envelope with ``{hasPermission: true, isSuperAdmin}``; 403 when not granted
    """
    result = await permissions_service.check_permission(
        session,
        identity=tenancy.identity,
        permission=permission,
    )
    return envelope(data=result, message="Permission check successful")

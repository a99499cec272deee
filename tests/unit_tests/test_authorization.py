"""Unit tests for permission checks against a seeded tenant database."""

from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from sqlalchemy.exc import SQLAlchemyError

from auth.permissions import REWARDS_DELETE, REWARDS_VIEW, STUDENT_ROLE
from auth.schemas import IdentityClaims
from errors import BadRequestError, ForbiddenError, InternalError, UnauthenticatedError
from repos import permissions_repo
from services import permissions_service


@pytest_asyncio.fixture
async def student(tenant_session):
    role = await permissions_repo.get_role_by_name(tenant_session, STUDENT_ROLE)
    return IdentityClaims(user_id=2, role_id=role.id, tenant_id=1, is_super_admin=False)


@pytest.fixture
def super_admin():
    # role 9999 holds nothing; only the flag grants access
    return IdentityClaims(user_id=1, role_id=9999, tenant_id=1, is_super_admin=True)


@pytest.mark.asyncio
async def test_granted_permission_passes(tenant_session, student):
    await permissions_service.authorize(
        tenant_session, identity=student, permission=REWARDS_VIEW
    )


@pytest.mark.asyncio
async def test_missing_grant_is_forbidden(tenant_session, student):
    with pytest.raises(ForbiddenError) as exc_info:
        await permissions_service.authorize(
            tenant_session, identity=student, permission=REWARDS_DELETE
        )

    assert exc_info.value.message == f"Insufficient permissions. Required: {REWARDS_DELETE}"
    assert exc_info.value.status_code == 403


@pytest.mark.asyncio
async def test_super_admin_skips_database(super_admin):
    """Test: Super-admins are allowed without any grant lookup."""
    session = AsyncMock()

    await permissions_service.authorize(session, identity=super_admin, permission=REWARDS_DELETE)

    session.execute.assert_not_called()


@pytest.mark.asyncio
async def test_missing_identity_is_unauthenticated(tenant_session):
    with pytest.raises(UnauthenticatedError):
        await permissions_service.authorize(tenant_session, identity=None, permission=REWARDS_VIEW)


@pytest.mark.asyncio
async def test_missing_tenant_session_is_internal_error(super_admin):
    with pytest.raises(InternalError) as exc_info:
        await permissions_service.authorize(None, identity=super_admin, permission=REWARDS_VIEW)

    assert exc_info.value.message == "Tenant database not initialized"


@pytest.mark.asyncio
async def test_grant_lookup_failure_is_internal_error():
    session = AsyncMock()
    session.execute.side_effect = SQLAlchemyError("relation does not exist")
    identity = IdentityClaims(user_id=2, role_id=2, tenant_id=1, is_super_admin=False)

    with pytest.raises(InternalError):
        await permissions_service.authorize(session, identity=identity, permission=REWARDS_VIEW)


@pytest.mark.asyncio
async def test_check_permission_granted(tenant_session, student):
    result = await permissions_service.check_permission(
        tenant_session, identity=student, permission=REWARDS_VIEW
    )

    assert result == {"hasPermission": True, "isSuperAdmin": False}


@pytest.mark.asyncio
async def test_check_permission_not_granted(tenant_session, student):
    with pytest.raises(ForbiddenError) as exc_info:
        await permissions_service.check_permission(
            tenant_session, identity=student, permission=REWARDS_DELETE
        )

    assert exc_info.value.message == f"Insufficient permissions. Required: {REWARDS_DELETE}"


@pytest.mark.asyncio
async def test_check_permission_unknown_name(tenant_session, student):
    """Test: A permission missing from the tenant catalogue is reported as not found."""
    with pytest.raises(ForbiddenError) as exc_info:
        await permissions_service.check_permission(
            tenant_session, identity=student, permission="LMS_COURSES_VIEW"
        )

    assert exc_info.value.message == "Permission LMS_COURSES_VIEW not found"


@pytest.mark.asyncio
async def test_check_permission_super_admin(super_admin):
    session = AsyncMock()

    result = await permissions_service.check_permission(
        session, identity=super_admin, permission="ANYTHING_AT_ALL"
    )

    assert result == {"hasPermission": True, "isSuperAdmin": True}
    session.execute.assert_not_called()


@pytest.mark.asyncio
@pytest.mark.parametrize("permission", ["", "   "])
async def test_check_permission_requires_name(tenant_session, student, permission):
    with pytest.raises(BadRequestError):
        await permissions_service.check_permission(
            tenant_session, identity=student, permission=permission
        )

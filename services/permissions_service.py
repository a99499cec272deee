"""Service layer for permission checks."""

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from auth.schemas import IdentityClaims
from errors import BadRequestError, ForbiddenError, InternalError, UnauthenticatedError
from repos import permissions_repo

logger = logging.getLogger(__name__)


async def authorize(
    session: AsyncSession | None,
    *,
    identity: IdentityClaims | None,
    permission: str,
) -> None:
    """
    Guard: allow the caller only if its role holds ``permission``.

    Super-admins are allowed without touching the database.

    Args:
        session: Tenant database session
        identity: Verified caller identity
        permission: Required permission name

    Raises:
        UnauthenticatedError: No identity (guard wired before authentication)
        InternalError: No tenant session, or the grant lookup failed
        ForbiddenError: Role lacks the permission
    """
    if identity is None:
        raise UnauthenticatedError("Authentication required")
    if session is None:
        raise InternalError("Tenant database not initialized")

    if identity.is_super_admin:
        logger.info(
            "Super admin %s bypassed permission check for: %s", identity.user_id, permission
        )
        return

    try:
        granted = await permissions_repo.has_grant(
            session, role_id=identity.role_id, permission_name=permission
        )
    except SQLAlchemyError as e:
        logger.error("Permission validation error: %s", e)
        raise InternalError("Error validating permissions") from e

    if not granted:
        logger.warning(
            "User %s (role %s) denied access - missing permission: %s",
            identity.user_id,
            identity.role_id,
            permission,
        )
        raise ForbiddenError(f"Insufficient permissions. Required: {permission}")

    logger.info("User %s granted access with permission: %s", identity.user_id, permission)


async def check_permission(
    session: AsyncSession,
    *,
    identity: IdentityClaims,
    permission: str,
) -> dict:
    """
    Answer "does the caller hold this permission?" for the permission-check endpoint.

    Unlike ``authorize`` this distinguishes a permission name the tenant does
    not know from one the role is not granted.

    Returns:
        ``{"hasPermission": True, "isSuperAdmin": bool}``

    Raises:
        BadRequestError: Empty permission name
        ForbiddenError: Unknown permission or not granted
        InternalError: Lookup failed
    """
    if not permission or not permission.strip():
        raise BadRequestError("permission is required")

    if identity.is_super_admin:
        logger.info("Super admin %s has permission: %s", identity.user_id, permission)
        return {"hasPermission": True, "isSuperAdmin": True}

    try:
        record = await permissions_repo.get_permission_by_name(session, permission)
        if record is None:
            logger.warning("Permission %s not found in database", permission)
            raise ForbiddenError(f"Permission {permission} not found")

        granted = await permissions_repo.has_grant(
            session, role_id=identity.role_id, permission_name=permission
        )
    except SQLAlchemyError as e:
        logger.error("Permission check error: %s", e)
        raise InternalError("Error validating permissions") from e

    logger.info(
        "User %s (role %s) permission check for %s: %s",
        identity.user_id,
        identity.role_id,
        permission,
        granted,
    )

    if not granted:
        raise ForbiddenError(f"Insufficient permissions. Required: {permission}")

    return {"hasPermission": True, "isSuperAdmin": False}

"""Service layer for login."""

import logging

from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

import config
from auth.jwt import issue_token
from auth.passwords import verify_password
from auth.schemas import IdentityClaims
from db import tenant_sessionmaker
from errors import BadRequestError, ForbiddenError, InternalError, UnauthenticatedError
from models.tenant import TenantResponse
from repos import permissions_repo, tenants_repo, users_repo
from tenant_pool import TenantConnectionPool

logger = logging.getLogger(__name__)


class LoginResult(BaseModel):
    """Payload returned by a successful login."""

    token: str
    permissions: list[str]
    role: str | None
    tenant: TenantResponse


def tenant_code_from_email(email: str) -> str:
    """
    Derive the tenant short code from an email address.

    The code is the domain label before the first dot:
    ``admin@acme.com`` -> ``acme``.

    Raises:
        BadRequestError: If the address has no usable domain
    """
    parts = email.split("@")
    if len(parts) != 2 or not parts[0] or not parts[1]:
        raise BadRequestError("Invalid email format")

    code = parts[1].split(".")[0]
    if not code:
        raise BadRequestError("Invalid email format")
    return code.lower()


async def login(
    admin_db: AsyncSession,
    pool: TenantConnectionPool,
    *,
    email: str,
    password: str,
) -> LoginResult:
    """
    Authenticate a user against its tenant database and mint a token.

    Args:
        admin_db: Admin directory session
        pool: Tenant connection pool
        email: User email; its domain selects the tenant
        password: Plain text password

    Returns:
        LoginResult with token, prefixed permissions, role name and tenant

    Raises:
        BadRequestError: Malformed email
        UnauthenticatedError: Unknown tenant, unknown user or wrong password
        ForbiddenError: Tenant inactive or user without role
        InternalError: Database failure
    """
    code = tenant_code_from_email(email)

    try:
        tenant = await tenants_repo.get_by_code(admin_db, code)
    except SQLAlchemyError as e:
        logger.error("Tenant lookup failed for code %s: %s", code, e)
        raise InternalError("Failed to resolve tenant") from e

    if tenant is None:
        raise UnauthenticatedError("Tenant not found")
    if not tenant.is_active:
        raise ForbiddenError("Tenant account is inactive")

    try:
        engine = await pool.acquire(tenant.connection_string, tenant.id)
    except SQLAlchemyError as e:
        logger.error("Tenant database unavailable for tenant %s: %s", tenant.id, e)
        raise InternalError("Tenant database not available") from e

    prefix = config.settings.PERMISSION_PREFIX

    try:
        async with tenant_sessionmaker(engine)() as session:
            user = await users_repo.get_by_email(session, email)

            if user is None or not user.password_hash:
                raise UnauthenticatedError("Invalid credentials")

            if not verify_password(password, user.password_hash):
                raise UnauthenticatedError("Invalid credentials")

            if user.role_id is None:
                raise ForbiddenError("User role not assigned")

            if user.is_super_admin:
                permissions = await permissions_repo.list_names(session, prefix=prefix)
            else:
                permissions = await permissions_repo.list_names_for_role(
                    session, role_id=user.role_id, prefix=prefix
                )

            claims = IdentityClaims(
                user_id=user.id,
                role_id=user.role_id,
                tenant_id=tenant.id,
                is_super_admin=user.is_super_admin,
            )
            role_name = user.role.name if user.role else None
    except SQLAlchemyError as e:
        logger.error("Login failed for tenant %s: %s", tenant.id, e)
        raise InternalError("Failed to authenticate user") from e

    logger.info("User %s logged in to tenant %s", claims.user_id, tenant.id)

    return LoginResult(
        token=issue_token(claims),
        permissions=permissions,
        role=role_name,
        tenant=TenantResponse.model_validate(tenant),
    )

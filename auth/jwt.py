"""JWT token creation and validation."""

import logging
from datetime import UTC, datetime, timedelta

from jose import ExpiredSignatureError, JWTError, jwt
from pydantic import ValidationError

import config
from auth.schemas import IdentityClaims
from errors import UnauthenticatedError

logger = logging.getLogger(__name__)


def issue_token(
    claims: IdentityClaims,
    expires_in: timedelta | None = None,
    *,
    secret: str | None = None,
) -> str:
    """
    Sign identity claims into a bearer token.

    Args:
        claims: Identity to encode
        expires_in: Token lifetime (defaults to JWT_EXPIRES_IN_HOURS, one day)
        secret: Signing secret override (defaults to JWT_SECRET)

    Returns:
        Encoded JWT token string
    """
    if expires_in is None:
        expires_in = timedelta(hours=config.settings.JWT_EXPIRES_IN_HOURS)

    now = datetime.now(UTC)
    payload = {
        "sub": str(claims.user_id),
        "role_id": claims.role_id,
        "tenant_id": claims.tenant_id,
        "is_super_admin": claims.is_super_admin,
        "iat": int(now.timestamp()),
        "exp": int((now + expires_in).timestamp()),  # JWT expects Unix timestamp
    }

    return jwt.encode(
        payload,
        secret or config.settings.JWT_SECRET,
        algorithm=config.settings.JWT_ALGORITHM,
    )


def verify_token(token: str, *, secret: str | None = None) -> IdentityClaims:
    """
    Decode and validate a JWT token.

    Args:
        token: JWT token string
        secret: Verification secret override (defaults to JWT_SECRET)

    Returns:
        IdentityClaims exactly as they were issued

    Raises:
        UnauthenticatedError: If the token is expired, tampered with or malformed
    """
    try:
        payload = jwt.decode(
            token,
            secret or config.settings.JWT_SECRET,
            algorithms=[config.settings.JWT_ALGORITHM],
        )
    except ExpiredSignatureError as e:
        raise UnauthenticatedError("Token has expired") from e
    except JWTError as e:
        logger.info("Rejected token: %s", e)
        raise UnauthenticatedError("Invalid or expired token") from e

    try:
        return IdentityClaims(
            user_id=int(payload["sub"]),
            role_id=payload["role_id"],
            tenant_id=payload["tenant_id"],
            is_super_admin=payload["is_super_admin"],
        )
    except (KeyError, TypeError, ValueError, ValidationError) as e:
        raise UnauthenticatedError("Malformed token claims") from e

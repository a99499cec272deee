"""
Application error taxonomy.

Every failure the request pipeline can report is one of five kinds. Each kind
maps to exactly one HTTP status and is rendered with the same JSON envelope
by ``api.responses``.
"""

import enum

from fastapi import status


class ErrorKind(str, enum.Enum):
    """Kinds of failure surfaced to API callers."""

    UNAUTHENTICATED = "unauthenticated"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    BAD_REQUEST = "bad_request"
    INTERNAL = "internal"


STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.UNAUTHENTICATED: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.BAD_REQUEST: status.HTTP_400_BAD_REQUEST,
    ErrorKind.INTERNAL: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


class AppError(Exception):
    """Base class for all domain errors."""

    kind: ErrorKind = ErrorKind.INTERNAL
    default_message: str = "Internal Server Error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    @property
    def status_code(self) -> int:
        return STATUS_BY_KIND[self.kind]


class UnauthenticatedError(AppError):
    """Missing, invalid or expired credentials."""

    kind = ErrorKind.UNAUTHENTICATED
    default_message = "Authentication required"


class ForbiddenError(AppError):
    """Caller is known but not allowed (inactive tenant, missing permission)."""

    kind = ErrorKind.FORBIDDEN
    default_message = "Forbidden"


class NotFoundError(AppError):
    kind = ErrorKind.NOT_FOUND
    default_message = "Not found"


class BadRequestError(AppError):
    kind = ErrorKind.BAD_REQUEST
    default_message = "Bad request"


class InternalError(AppError):
    kind = ErrorKind.INTERNAL

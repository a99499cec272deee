"""
Response envelope and exception handlers.

Every response, success or failure, has the same body:

    {"message": "...", "data": <payload or null>, "statusCode": 200}

and the HTTP status always mirrors ``statusCode``.
"""

import logging
from typing import Any

from fastapi import Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from errors import AppError

logger = logging.getLogger(__name__)


def envelope(
    data: Any = None,
    message: str = "",
    status_code: int = status.HTTP_200_OK,
) -> JSONResponse:
    """
    Build an enveloped JSON response.

    Args:
        data: Response payload (anything ``jsonable_encoder`` accepts)
        message: Human-readable message
        status_code: HTTP status, repeated in the body

    Returns:
        JSONResponse with the standard envelope
    """
    return JSONResponse(
        status_code=status_code,
        content={
            "message": message,
            "data": jsonable_encoder(data),
            "statusCode": status_code,
        },
    )


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    logger.info(
        "%s %s -> %d %s", request.method, request.url.path, exc.status_code, exc.message
    )
    return envelope(message=exc.message, status_code=exc.status_code)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return envelope(message=str(exc.detail), status_code=exc.status_code)


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report the first validation failure as a 400."""
    errors = exc.errors()
    message = "Invalid request"
    if errors:
        first = errors[0]
        field = ".".join(str(loc) for loc in first["loc"] if loc not in ("body", "path", "query"))
        message = f"{field}: {first['msg']}" if field else first["msg"]

    return envelope(message=message, status_code=status.HTTP_400_BAD_REQUEST)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "Unhandled exception on %s %s: %s",
        request.method,
        request.url.path,
        exc,
        exc_info=exc,
    )
    # Internal details are not exposed
    return envelope(
        message="Internal Server Error",
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


def register_exception_handlers(app) -> None:
    """
    Register all exception handlers with the FastAPI app.

    Args:
        app: The FastAPI application instance
    """
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

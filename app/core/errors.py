# Typed failures raised by the services and rendered at the API boundary.
# Every mutation reports one of these instead of leaking a raw storage error.

import logging

from fastapi import Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger("app")

class AppError(Exception):
    """Base class for failures returned to the presentation layer"""
    status_code: int = status.HTTP_400_BAD_REQUEST
    code: str = "error"
    default_message: str = "Request failed"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)

class UnauthenticatedError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "unauthenticated"
    default_message = "Authentication required"

class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"
    default_message = "Not found"

class ForbiddenError(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "forbidden"
    default_message = "Not enough permissions"

class ValidationError(AppError):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    code = "validation_error"
    default_message = "Invalid input"

class ConflictError(AppError):
    status_code = status.HTTP_409_CONFLICT
    code = "conflict"
    default_message = "Concurrent update conflict"

async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 409:
        logger.warning(f"{exc.code} on {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "code": exc.code},
    )

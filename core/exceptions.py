# core/exceptions.py
import logging
from datetime import datetime

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


# ========================================
# ❌ Domain error taxonomy
# ========================================
class AppError(Exception):
    """Base class for errors raised by domain services."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class NotFoundError(AppError):
    """Project, task, calendar, event or time entry is missing."""

    status_code = status.HTTP_404_NOT_FOUND


class UnauthorizedError(AppError):
    """Ownership, role or membership check failed."""

    status_code = status.HTTP_403_FORBIDDEN


class AuthenticationError(AppError):
    """Bearer token missing or rejected by the identity service."""

    status_code = status.HTTP_401_UNAUTHORIZED


class BadRequestError(AppError):
    """Referential mismatch or invalid state transition."""

    status_code = status.HTTP_400_BAD_REQUEST


class InternalError(AppError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class IdentityServiceError(InternalError):
    """The identity service could not be reached or answered unexpectedly."""


# ========================================
# 🧯 HTTP mapping
# ========================================
def error_body(status_code: int, message: str) -> dict:
    return {
        "status": status_code,
        "message": message,
        "timestamp": datetime.utcnow().isoformat(),
    }


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("❌ %s %s failed: %s", request.method, request.url.path, exc.message)
    else:
        logger.info("%s %s rejected (%s): %s", request.method, request.url.path, exc.status_code, exc.message)
    return JSONResponse(status_code=exc.status_code, content=error_body(exc.status_code, exc.message))


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("❌ Unexpected error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body(status.HTTP_500_INTERNAL_SERVER_ERROR, "An unexpected error occurred."),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

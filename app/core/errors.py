"""Application error taxonomy and the handlers that render it as JSON."""

import logging
from datetime import datetime, timezone

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Expected, caller-recoverable failure surfaced directly to the client."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "INTERNAL_SERVER_ERROR"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def details(self) -> dict:
        return {}


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "RESOURCE_NOT_FOUND"


class ForbiddenError(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "FORBIDDEN"


class BadRequestError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "BAD_REQUEST"


class ConflictError(AppError):
    """Uniqueness violation; safe for the caller to retry or report."""

    status_code = status.HTTP_409_CONFLICT
    code = "CONFLICT"


class ExpiredError(AppError):
    """A public link that existed but is past its expiry instant."""

    status_code = status.HTTP_410_GONE
    code = "LINK_EXPIRED"

    def __init__(self, message: str, expired_at: datetime):
        self.expired_at = expired_at
        super().__init__(message)

    def details(self) -> dict:
        return {"expired_at": self.expired_at.isoformat()}


def error_body(code: str, message: str, **details) -> dict:
    return {
        "code": code,
        "message": message,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        **details,
    }


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=error_body(exc.code, exc.message, **exc.details()))


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Unhandled exception on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body("INTERNAL_SERVER_ERROR", "An unexpected error occurred"),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

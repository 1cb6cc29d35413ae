"""
Error taxonomy
Every error surfaced to API callers carries a machine-readable ``kind`` and a
human-readable message.
"""
import logging
from typing import Any, List, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class AppError(Exception):
    kind = "internal"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, details: Optional[List[Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self):
        body = {"error": self.message, "kind": self.kind}
        if self.details:
            body["details"] = self.details
        return body


class NotFoundError(AppError):
    kind = "not_found"
    status_code = status.HTTP_404_NOT_FOUND


class ValidationFailedError(AppError):
    kind = "validation"
    status_code = status.HTTP_400_BAD_REQUEST


class StoreUnavailableError(AppError):
    """The persistence layer could not be reached. Callers may retry."""

    kind = "store_unavailable"
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


class UnauthenticatedError(AppError):
    kind = "unauthenticated"
    status_code = status.HTTP_401_UNAUTHORIZED


def _format_validation_error(error: dict) -> str:
    location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
    message = error.get("msg", "Invalid value")
    return f"{location}: {message}" if location else message


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def handle_app_error(request: Request, exc: AppError):
        if exc.status_code >= 500:
            logger.error(f"{exc.kind} on {request.method} {request.url.path}: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        details = [_format_validation_error(err) for err in exc.errors()]
        return JSONResponse(
            status_code=ValidationFailedError.status_code,
            content=ValidationFailedError("Validation Error", details).to_dict(),
        )

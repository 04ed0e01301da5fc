"""
Exception handlers rendering every failure into one JSON envelope:

    {"success": false, "error": {"code", "message", "details"}, "timestamp", "path"}

Expected domain outcomes (401/403/404/409/422) are logged at WARNING; store
outages and unhandled errors at ERROR.
"""

import logging
import traceback
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from app.core.database.record_store import RecordConflictError, RecordStoreError
from app.core.exceptions import AppException

logger = logging.getLogger(__name__)

_EXPECTED_STATUS_CODES = {400, 401, 403, 404, 409, 422}


def create_error_response(
    status_code: int,
    error_code: str,
    message: str,
    details: Optional[Dict[str, Any]] = None,
    path: Optional[str] = None,
) -> JSONResponse:
    """Build the error envelope shared by all handlers."""
    content = {
        "success": False,
        "error": {
            "code": error_code,
            "message": message,
            "details": details or {},
        },
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    if path:
        content["path"] = path
    return JSONResponse(status_code=status_code, content=content)


def _request_extra(request: Request, **extra) -> Dict[str, Any]:
    return {"endpoint": request.url.path, "method": request.method, **extra}


def _exposes_internals(request: Request) -> bool:
    env = getattr(request.app.state, "environment", "production").lower()
    return env in ("development", "dev", "test")


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the application's exception handlers to `app`."""

    @app.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException):
        log = logger.warning if exc.status_code in _EXPECTED_STATUS_CODES else logger.error
        log(
            f"{exc.error_code}: {exc.message}",
            extra=_request_extra(request, error_code=exc.error_code),
        )
        response = create_error_response(
            status_code=exc.status_code,
            error_code=exc.error_code,
            message=exc.message,
            details=exc.details,
            path=request.url.path,
        )
        if exc.headers:
            response.headers.update(exc.headers)
        return response

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        errors = [
            {
                "field": ".".join(str(loc) for loc in error["loc"] if loc != "body"),
                "message": error["msg"],
                "type": error["type"],
            }
            for error in exc.errors()
        ]
        logger.warning(
            f"Validation error on {request.url.path}",
            extra=_request_extra(request, error_code="validation_error"),
        )
        return create_error_response(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            error_code="validation_error",
            message="Request validation failed",
            details={"errors": errors},
            path=request.url.path,
        )

    @app.exception_handler(RecordStoreError)
    async def record_store_exception_handler(request: Request, exc: RecordStoreError):
        """Store-level errors a service did not translate into a domain error."""
        conflict = isinstance(exc, RecordConflictError)
        logger.warning(
            f"Unhandled record store error: {exc}",
            extra=_request_extra(request, error_code="resource_conflict"),
        )
        return create_error_response(
            status_code=status.HTTP_409_CONFLICT if conflict else status.HTTP_404_NOT_FOUND,
            error_code="resource_conflict" if conflict else "resource_not_found",
            message="The record changed while the request was being processed",
            details={"table": getattr(exc, "table", None)},
            path=request.url.path,
        )

    @app.exception_handler(SQLAlchemyError)
    async def sqlalchemy_exception_handler(request: Request, exc: SQLAlchemyError):
        logger.error(
            f"Database error: {exc}",
            extra=_request_extra(request, error_code="dependency_failure"),
            exc_info=True,
        )
        return create_error_response(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            error_code="dependency_failure",
            message="The database is currently unavailable. Please try again later.",
            details={"service": "database"},
            path=request.url.path,
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.error(
            f"Unhandled exception: {exc}",
            extra=_request_extra(request, error_code="internal_server_error"),
            exc_info=True,
        )
        message = "An unexpected error occurred. Please try again later."
        details: Dict[str, Any] = {}
        if _exposes_internals(request):
            message = str(exc)
            details = {
                "error_type": type(exc).__name__,
                "traceback": traceback.format_exc().split("\n"),
            }
        return create_error_response(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            error_code="internal_server_error",
            message=message,
            details=details,
            path=request.url.path,
        )


__all__ = ["create_error_response", "register_exception_handlers"]

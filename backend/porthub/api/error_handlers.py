"""Error Handlers — render PortHubErrors and request validation failures as the PortHub error envelope.

Invariants:
    - Rejected Outcomes reach the client through the PortHubError handler
      (api/dependencies.unwrap_or_raise re-raises the original error)
    - Body is always {"error": {code, message, category, severity, timestamp, context}};
      validation errors add `field`, state conflicts add `current_status` when known
    - Schema validation failures use the same VALIDATION_ERROR code as engine
      validation, with `field` naming the first offending body/query field
    - PersistenceFailure (503) carries Retry-After; nothing internal is leaked

Design Decisions:
    - Logged by severity: CRITICAL at error, ERROR at warning, the rest at info.
      A lost claim race is routine traffic, a dead database is not
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from porthub.core.errors import (
    ErrorCategory, ErrorSeverity, PersistenceFailure, PortHubError,
    StateConflictRejection, ValidationRejection,
)

logger = logging.getLogger(__name__)

RETRY_AFTER_SECONDS = 5

_LOG_LEVELS = {
    ErrorSeverity.CRITICAL: logging.ERROR,
    ErrorSeverity.ERROR: logging.WARNING,
}


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(PortHubError, porthub_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)


def error_body(exc: PortHubError) -> dict:
    body = exc.to_response()
    if isinstance(exc, ValidationRejection):
        body["error"]["field"] = exc.field
    if isinstance(exc, StateConflictRejection) and exc.current_status:
        body["error"]["current_status"] = exc.current_status
    return body


async def porthub_error_handler(request: Request, exc: PortHubError) -> JSONResponse:
    logger.log(
        _LOG_LEVELS.get(exc.severity, logging.INFO),
        f"{request.method} {request.url.path} -> {exc.http_status} {exc.code}: {exc.message}",
        extra={
            "error_code": exc.code,
            "job_number": exc.context.job_number,
            "account_id": exc.context.account_id,
            "path": request.url.path,
        },
    )
    headers = None
    if isinstance(exc, PersistenceFailure):
        headers = {"Retry-After": str(RETRY_AFTER_SECONDS)}
    return JSONResponse(
        status_code=exc.http_status, content=error_body(exc), headers=headers,
    )


async def validation_error_handler(
    request: Request, exc: RequestValidationError,
) -> JSONResponse:
    details = [
        {
            "field": _field_name(e["loc"]),
            "message": e["msg"],
            "type": e["type"],
        }
        for e in exc.errors()
    ]
    logger.info(
        f"Invalid request on {request.url.path}: {[d['field'] for d in details]}",
        extra={"error_code": "VALIDATION_ERROR", "path": request.url.path},
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": {
                "code": "VALIDATION_ERROR",
                "message": "Invalid request data",
                "category": ErrorCategory.VALIDATION.value,
                "severity": ErrorSeverity.ERROR.value,
                "field": details[0]["field"] if details else None,
                "details": details,
            },
        },
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "Something went wrong. Try again.",
                "category": ErrorCategory.INTERNAL.value,
                "severity": ErrorSeverity.CRITICAL.value,
            },
        },
    )


def _field_name(loc: tuple) -> str:
    # ("body", "payment") -> "payment"; ("query", "page") -> "page"
    parts = [str(part) for part in loc if part not in ("body", "query", "path")]
    return ".".join(parts) or ".".join(str(part) for part in loc)

"""Mapping of domain errors to HTTP responses.

Every failure is returned as ``{"success": false, "message": ...}``. The most
specific class wins, so ``DeliveryUnavailableError`` maps to 404 even though
it is a ``ConflictError``.
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from protean.exceptions import ObjectNotFoundError, ProteanException, ValidationError

from marketplace.errors import (
    ConflictError,
    DeliveryUnavailableError,
    PermissionDeniedError,
    UpstreamError,
    error_message,
)

logger = structlog.get_logger(__name__)

ERROR_STATUS_CODES = (
    (DeliveryUnavailableError, 404),
    (ConflictError, 400),
    (ValidationError, 400),
    (PermissionDeniedError, 403),
    (ObjectNotFoundError, 404),
    (UpstreamError, 500),
)

GENERIC_ERROR_MESSAGE = "Internal server error."


def status_code_for(exc: Exception) -> int:
    for exc_cls, status_code in ERROR_STATUS_CODES:
        if isinstance(exc, exc_cls):
            return status_code
    return 500


def _failure(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "message": message})


async def domain_error_handler(request: Request, exc: ProteanException) -> JSONResponse:
    status_code = status_code_for(exc)
    if status_code >= 500 and not isinstance(exc, UpstreamError):
        logger.error("unhandled_domain_error", path=request.url.path, error_type=type(exc).__name__, exc_info=exc)
        return _failure(status_code, GENERIC_ERROR_MESSAGE)

    if status_code >= 500:
        logger.error("upstream_error", path=request.url.path, error=error_message(exc))
    return _failure(status_code, error_message(exc))


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = "; ".join(
        f"{'.'.join(str(part) for part in error['loc'] if part != 'body')}: {error['msg']}" for error in exc.errors()
    )
    return _failure(400, details or "Invalid request")


async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("unexpected_error", path=request.url.path, error_type=type(exc).__name__, exc_info=exc)
    return _failure(500, GENERIC_ERROR_MESSAGE)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ProteanException, domain_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unexpected_error_handler)

import logging
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError
from services.errors import (
    CampusEventsError,
    NotFound,
    PolicyViolation,
    PermissionDenied,
    AuthenticationRequired,
    ValidationFailed,
    TransientFailure,
    StorageError,
)

logger = logging.getLogger(__name__)

STATUS_CODES = [
    (NotFound, 404),
    (PolicyViolation, 409),
    (PermissionDenied, 403),
    (AuthenticationRequired, 401),
    (ValidationFailed, 400),
    (TransientFailure, 503),
    (StorageError, 500),
]


def status_code_for(exc: CampusEventsError) -> int:
    for error_class, status_code in STATUS_CODES:
        if isinstance(exc, error_class):
            return status_code
    return 500


async def campus_events_error_handler(request: Request, exc: CampusEventsError):
    status_code = status_code_for(exc)
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.code} {exc.context}")
    else:
        logger.info(f"{request.method} {request.url.path} -> {status_code} {exc.code}")

    headers = {"WWW-Authenticate": "Bearer"} if status_code == 401 else None
    return JSONResponse(
        {"detail": exc.message, "code": exc.code},
        status_code=status_code,
        headers=headers,
    )


async def operational_error_handler(request: Request, exc: OperationalError):
    raw = str(exc.orig) if getattr(exc, "orig", None) else str(exc)
    logger.error(f"Database error on {request.method} {request.url.path}: {raw}")
    return JSONResponse(
        {"detail": TransientFailure.message, "code": TransientFailure.code},
        status_code=503,
    )


async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    """Malformed request input, reported like ValidationFailed"""
    errors = exc.errors()
    message = ValidationFailed.message
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path"))
        message = f"{field}: {first.get('msg')}" if field else first.get("msg", message)
    logger.info(f"{request.method} {request.url.path} -> 400 {ValidationFailed.code}: {message}")
    return JSONResponse(
        {"detail": message, "code": ValidationFailed.code},
        status_code=400,
    )


def register_exception_handlers(app: FastAPI):
    app.add_exception_handler(CampusEventsError, campus_events_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(OperationalError, operational_error_handler)

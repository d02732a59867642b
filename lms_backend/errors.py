"""
Domain exceptions

Raised by services and stores, mapped to HTTP responses by the handlers
registered in register_exception_handlers().
"""

import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from lms_backend.config import STORE_RETRY_AFTER_SECONDS

logger = logging.getLogger(__name__)


class LMSError(Exception):
    """Base class for all domain errors"""

    status_code = 500

    def __init__(self, message: str = "Internal server error"):
        super().__init__(message)
        self.message = message


class ValidationError(LMSError):
    """Empty text, malformed ids/variants, bad field values"""

    status_code = 400


class AuthenticationError(LMSError):
    status_code = 401

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message)


class AccessDeniedError(LMSError):
    status_code = 403

    def __init__(self, message: str = "Access denied"):
        super().__init__(message)


class NotFoundError(LMSError):
    status_code = 404

    def __init__(self, message: str = "The requested entity was not found"):
        super().__init__(message)


class ConflictError(LMSError):
    status_code = 409


class DuplicatePairError(ConflictError):
    """A conversation already exists for this participant pair"""

    def __init__(self, pair_key: str):
        super().__init__(f"Conversation already exists for pair {pair_key}")
        self.pair_key = pair_key


class StoreTimeoutError(LMSError):
    """The database did not answer within the configured bound (retryable)"""

    status_code = 503

    def __init__(self, message: str = "Database timed out, please retry"):
        super().__init__(message)


# ==================== HTTP MAPPING ====================

async def lms_error_handler(request: Request, exc: LMSError) -> JSONResponse:
    headers = None
    if isinstance(exc, StoreTimeoutError):
        headers = {"Retry-After": str(STORE_RETRY_AFTER_SECONDS)}
        logger.warning("Store timeout on %s %s", request.method, request.url.path)
    elif exc.status_code >= 500:
        logger.error("%s on %s: %s", type(exc).__name__, request.url.path, exc.message)

    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message},
        headers=headers,
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Body and query validation failures map to 400"""
    return JSONResponse(
        status_code=400,
        content={"detail": "Validation error", "errors": jsonable_encoder(exc.errors())},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(LMSError, lms_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)

"""Typed error taxonomy and the handlers that render it."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class BusinessLogicError(Exception):
    """Base class for errors surfaced to API callers.

    Every subclass maps to one HTTP status and one short machine-readable
    ``reason`` so clients can tell "already taken" from "not found".
    """

    status_code: int = status.HTTP_400_BAD_REQUEST
    reason: str = "business_error"

    def __init__(self, detail: str, status_code: int | None = None):
        self.detail = detail
        if status_code is not None:
            self.status_code = status_code
        super().__init__(detail)


class InputValidationError(BusinessLogicError):
    """Bad input shape or values, rejected before any write."""

    status_code = status.HTTP_400_BAD_REQUEST
    reason = "validation_error"


class NotFoundError(BusinessLogicError):
    status_code = status.HTTP_404_NOT_FOUND
    reason = "not_found"


class ConflictError(BusinessLogicError):
    """The target is no longer in a state that allows the operation."""

    status_code = status.HTTP_400_BAD_REQUEST
    reason = "conflict"


class ForbiddenError(BusinessLogicError):
    status_code = status.HTTP_403_FORBIDDEN
    reason = "forbidden"


class UnauthenticatedError(BusinessLogicError):
    status_code = status.HTTP_401_UNAUTHORIZED
    reason = "unauthenticated"


class InternalError(BusinessLogicError):
    """Storage or other unexpected failure; the detail is always generic."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    reason = "internal_error"


def _error_body(reason: str, message: str) -> dict[str, object]:
    return {"success": False, "reason": reason, "message": message}


def register_exception_handlers(app: FastAPI) -> None:
    """Attach shared exception handlers to the FastAPI app."""

    @app.exception_handler(BusinessLogicError)
    async def _business_error_handler(request: Request, exc: BusinessLogicError):
        if exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.detail)
        headers = None
        if exc.status_code == status.HTTP_401_UNAUTHORIZED:
            headers = {"WWW-Authenticate": "Bearer"}
        return JSONResponse(
            _error_body(exc.reason, exc.detail),
            status_code=exc.status_code,
            headers=headers,
        )

    @app.exception_handler(RequestValidationError)
    async def _request_validation_handler(request: Request, exc: RequestValidationError):
        logger.warning("Validation error for %s: %s", request.url.path, exc.errors())
        body = _error_body(InputValidationError.reason, "Invalid request data")
        body["errors"] = jsonable_encoder(exc.errors(), custom_encoder={ValueError: str})
        return JSONResponse(body, status_code=status.HTTP_400_BAD_REQUEST)

"""Error taxonomy shared by services and routers."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from marketplace.schemas import describe_error

logger = logging.getLogger(__name__)


class ServiceError(Exception):
    """Base class for errors that map onto an HTTP response."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"message": self.message}


class ValidationError(ServiceError):
    status_code = 400

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field

    def to_dict(self) -> dict:
        body = super().to_dict()
        if self.field:
            body["field"] = self.field
        return body


class ConflictError(ServiceError):
    status_code = 409


class AuthError(ServiceError):
    """Missing or wrong credentials."""

    status_code = 401


class ForbiddenError(AuthError):
    """Credential present but invalid, expired or lacking the required role."""

    status_code = 403


class NotFoundError(ServiceError):
    status_code = 404


class InternalError(ServiceError):
    status_code = 500

    def __init__(self, message: str = "Internal server error", details: Optional[str] = None):
        super().__init__(message)
        self.details = details

    def to_dict(self) -> dict:
        body = super().to_dict()
        if self.details:
            body["details"] = self.details
        return body


@contextmanager
def internal_errors(message: str = "Internal server error") -> Iterator[None]:
    """Turn anything that is not already a ServiceError into an InternalError."""
    try:
        yield
    except ServiceError:
        raise
    except Exception as exc:
        logger.exception(message)
        raise InternalError(message, details=str(exc)) from exc


async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(exc.to_dict(), status_code=exc.status_code)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render FastAPI's own parsing failures (bad JSON, query, form) as a 400 ValidationError."""
    errors = exc.errors()
    first = errors[0] if errors else {}
    if first.get("type") == "json_invalid":
        error = ValidationError("Request body is not valid JSON")
    else:
        # drop the "body"/"query"/"path" prefix so the field reads like a payload key
        invalid = describe_error(first, first.get("loc", ())[1:])
        error = ValidationError(invalid.message, field=invalid.field)
    return JSONResponse(error.to_dict(), status_code=error.status_code)

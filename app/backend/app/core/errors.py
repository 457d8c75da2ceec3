"""Domain error taxonomy and its HTTP translation."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class DomainError(Exception):
    """Base class for errors raised by services and repositories."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(DomainError):
    """Requested project or entity id does not exist."""

    status_code = status.HTTP_404_NOT_FOUND


class ValidationError(DomainError):
    """Input rejected before it reaches the store."""

    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY


class InfrastructureError(DomainError):
    """Underlying storage is unreachable or failed."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


async def _domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    if isinstance(exc, InfrastructureError):
        logger.error("Storage failure on %s %s: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainError, _domain_error_handler)

"""Exception handlers mapping dashboard errors to JSON ``{"error": ...}`` responses.

InvalidInputError -> 400, OrganizationNotFoundError -> 404, any other
DealboardError -> 500. Only the public message reaches the client; internal
detail stays in the logs.
"""

from __future__ import annotations

import structlog
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from src.dealboard.deals.errors import (
    DealboardError,
    InvalidInputError,
    OrganizationNotFoundError,
)

logger = structlog.get_logger(__name__)

_STATUS_BY_ERROR: dict[type[DealboardError], int] = {
    InvalidInputError: status.HTTP_400_BAD_REQUEST,
    OrganizationNotFoundError: status.HTTP_404_NOT_FOUND,
}


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


async def dealboard_error_handler(request: Request, exc: DealboardError) -> JSONResponse:
    """Render a DealboardError with its public message and mapped status code."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    for error_type, code in _STATUS_BY_ERROR.items():
        if isinstance(exc, error_type):
            status_code = code
            break

    log_method = logger.warning if status_code < 500 else logger.error
    log_method(
        "api.request_failed",
        path=request.url.path,
        status_code=status_code,
        error_type=type(exc).__name__,
        error=str(exc),
    )
    return error_response(status_code, exc.public_message)


def register_exception_handlers(app: FastAPI) -> None:
    """Install the dashboard error handlers on ``app``."""
    app.add_exception_handler(DealboardError, dealboard_error_handler)

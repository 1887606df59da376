"""
Error handling utilities for API routes.

Route handlers let GatewayError propagate; the handler registered here maps
it to the JSON error body and status code every client of the gateway sees:

    {"error": "<message>"}
"""

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from wagate.core.exceptions import GatewayError, InvalidRequest
from wagate.core.logging.logger import get_logger


def error_response(status_code: int, message: str) -> JSONResponse:
    """Build the gateway's JSON error response."""
    return JSONResponse(status_code=status_code, content={"error": message})


async def gateway_error_handler(request: Request, exc: GatewayError) -> JSONResponse:
    """Exception handler for every GatewayError raised by a route."""
    logger = get_logger(__name__)
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        f"{exc.error_code} ({exc.status_code}) on {request.method} "
        f"{request.url.path}: {exc.message}"
    )
    return error_response(exc.status_code, exc.message)


async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Answer malformed request bodies with 400 instead of FastAPI's 422."""
    errors = [
        {
            "field": " -> ".join(str(loc) for loc in error["loc"]),
            "message": error["msg"],
        }
        for error in exc.errors()
    ]
    get_logger(__name__).warning(
        f"Invalid request body on {request.method} {request.url.path}: {errors}"
    )
    error = InvalidRequest()
    return JSONResponse(
        status_code=error.status_code,
        content={"error": error.message, "details": errors},
    )

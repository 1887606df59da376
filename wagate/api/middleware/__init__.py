"""HTTP middleware for the gateway API."""

from .auth import BearerAuthMiddleware
from .error_handler import ErrorHandlerMiddleware
from .request_logging import RequestLoggingMiddleware

__all__ = [
    "BearerAuthMiddleware",
    "ErrorHandlerMiddleware",
    "RequestLoggingMiddleware",
]

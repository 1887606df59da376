"""API utilities."""

from .error_helpers import (
    error_response,
    gateway_error_handler,
    validation_error_handler,
)

__all__ = ["error_response", "gateway_error_handler", "validation_error_handler"]

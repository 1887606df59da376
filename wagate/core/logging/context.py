"""
Log context management using contextvars for automatic propagation.

The request id is set once per HTTP request by the request logging middleware;
the session phone is set by the coordinator whenever the WhatsApp session opens
or closes. Both are picked up by every ContextLogger call without manual
parameter passing.
"""

from contextvars import ContextVar

_phone_context: ContextVar[str | None] = ContextVar(
    "phone", default=None
)  # From the open WhatsApp session
_request_context: ContextVar[str | None] = ContextVar(
    "request_id", default=None
)  # From request logging middleware


def set_log_context(
    phone: str | None = None,
    request_id: str | None = None,
) -> None:
    """
    Set the log context for the current async context.

    Args:
        phone: Phone identity of the connected WhatsApp account
        request_id: Identifier of the HTTP request being processed
    """
    if phone is not None:
        _phone_context.set(phone)
    if request_id is not None:
        _request_context.set(request_id)


def get_current_phone_context() -> str | None:
    """Get the current session phone from context variables."""
    return _phone_context.get()


def get_current_request_context() -> str | None:
    """Get the current request id from context variables."""
    return _request_context.get()


def clear_log_context() -> None:
    """
    Clear the log context.

    Used when the session closes and in tests.
    """
    _phone_context.set(None)
    _request_context.set(None)


def get_context_info() -> dict[str, str | None]:
    """Get current context information for debugging."""
    return {
        "phone": get_current_phone_context(),
        "request_id": get_current_request_context(),
    }

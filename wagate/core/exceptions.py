"""
Gateway error taxonomy.

Every user-facing failure carries the HTTP status and the error code the API
layer answers with; ProtocolClosed and ProtocolClientError stay internal to
the session coordinator.
"""


class GatewayError(Exception):
    """Base class for all gateway errors."""

    status_code: int = 500
    error_code: str = "GATEWAY_ERROR"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message()
        super().__init__(self.message)

    @classmethod
    def default_message(cls) -> str:
        return cls.__name__


class Unauthorized(GatewayError):
    status_code = 401
    error_code = "UNAUTHORIZED"

    @classmethod
    def default_message(cls) -> str:
        return "Unauthorized"


class InvalidRequest(GatewayError):
    status_code = 400
    error_code = "INVALID_REQUEST"

    @classmethod
    def default_message(cls) -> str:
        return "phone and message are required"


class NotConnected(GatewayError):
    status_code = 503
    error_code = "NOT_CONNECTED"

    @classmethod
    def default_message(cls) -> str:
        return "WhatsApp is not connected"


class RecipientNotRegistered(GatewayError):
    status_code = 404
    error_code = "RECIPIENT_NOT_REGISTERED"

    def __init__(self, target: str):
        self.target = target
        super().__init__(f"{target} is not registered on WhatsApp")


class SendTimeout(GatewayError):
    status_code = 504
    error_code = "SEND_TIMEOUT"

    def __init__(self, timeout: float):
        self.timeout = timeout
        super().__init__(f"Message was not sent within {timeout:g}s")


class SendFailure(GatewayError):
    status_code = 500
    error_code = "SEND_FAILED"

    @classmethod
    def default_message(cls) -> str:
        return "Failed to send message"


class LogoutFailure(GatewayError):
    status_code = 500
    error_code = "LOGOUT_FAILED"

    @classmethod
    def default_message(cls) -> str:
        return "Failed to close the session"


class StoreUnavailable(GatewayError):
    status_code = 500
    error_code = "STORE_UNAVAILABLE"

    @classmethod
    def default_message(cls) -> str:
        return "Credential storage is unavailable"


class ProtocolClientError(GatewayError):
    """Transport-level failure talking to the protocol client."""

    status_code = 502
    error_code = "PROTOCOL_CLIENT_ERROR"


class ProtocolClosed(GatewayError):
    """The protocol session closed; handled inside the coordinator."""

    error_code = "PROTOCOL_CLOSED"

    def __init__(self, reason):
        self.reason = reason
        super().__init__(f"Connection closed: {reason}")

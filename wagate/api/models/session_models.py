"""
Pydantic schemas for the gateway HTTP API.

Field names follow the JSON the gateway has always served (hasQR, not
has_qr), so existing callers keep working.
"""

from pydantic import BaseModel, ConfigDict, Field


class SendMessageRequest(BaseModel):
    """Body of POST /api/send-message.

    Both fields are optional at the schema level; the route answers a missing
    or blank value with 400 instead of a validation error.
    """

    phone: str | None = Field(
        None, description="Recipient phone number (digits, optional +) or JID"
    )
    message: str | None = Field(None, description="Text content of the message")


class StatusResponse(BaseModel):
    """Current session status."""

    model_config = ConfigDict(populate_by_name=True)

    connected: bool
    phone: str | None = None
    has_qr: bool = Field(False, alias="hasQR")


class QrResponse(BaseModel):
    """Pending QR code or a human-readable explanation of why there is none."""

    qr: str | None = Field(None, description="PNG data URI of the pairing QR code")
    connected: bool | None = None
    message: str | None = None


class SuccessResponse(BaseModel):
    success: bool = True
    message: str | None = None


class ConnectResponse(BaseModel):
    success: bool = True
    state: str
    status: StatusResponse


class HealthResponse(BaseModel):
    status: str = "ok"
    connected: bool

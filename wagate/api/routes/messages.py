"""
Message sending endpoint.
"""

from fastapi import APIRouter, Depends

from wagate.api.dependencies.session_dependencies import get_session_coordinator
from wagate.api.models.session_models import SendMessageRequest, SuccessResponse
from wagate.core.exceptions import InvalidRequest
from wagate.core.session.coordinator import SessionCoordinator

router = APIRouter(prefix="/api", tags=["Messages"])


@router.post("/send-message", response_model=SuccessResponse)
async def send_message(
    payload: SendMessageRequest | None = None,
    coordinator: SessionCoordinator = Depends(get_session_coordinator),
) -> SuccessResponse:
    """Send a text message to a phone number registered on WhatsApp.

    Errors:
        400: phone or message missing
        503: WhatsApp is not connected
        404: the number has no WhatsApp account
        504: the send did not complete in time
        500: the send failed
    """
    if payload is None or not (payload.phone or "").strip() or not payload.message:
        raise InvalidRequest()

    await coordinator.send_message(payload.phone, payload.message)
    return SuccessResponse(message="Message sent")

"""
Session endpoints: status, QR code, logout and connect.

All routes live under /api/ and are protected by the bearer auth middleware
when an API key is configured.
"""

from fastapi import APIRouter, Depends

from wagate.api.dependencies.session_dependencies import get_session_coordinator
from wagate.api.models.session_models import (
    ConnectResponse,
    QrResponse,
    StatusResponse,
    SuccessResponse,
)
from wagate.core.logging.logger import get_api_logger
from wagate.core.session.coordinator import SessionCoordinator

router = APIRouter(prefix="/api", tags=["Session"])


@router.get("/status", response_model=StatusResponse, response_model_by_alias=True)
async def get_status(
    coordinator: SessionCoordinator = Depends(get_session_coordinator),
) -> StatusResponse:
    """Return `{connected, phone, hasQR}` from the current snapshot."""
    return StatusResponse(**coordinator.status())


@router.get("/qr", response_model=QrResponse, response_model_exclude_none=True)
async def get_qr(
    coordinator: SessionCoordinator = Depends(get_session_coordinator),
) -> QrResponse:
    """
    Return the pending pairing QR code as a PNG data URI.

    When already connected, or while no QR has been issued yet, the response
    carries a message instead.
    """
    snapshot = coordinator.snapshot
    if snapshot.connected:
        return QrResponse(connected=True, message="Already connected")
    if snapshot.has_qr:
        return QrResponse(qr=snapshot.qr)
    return QrResponse(message="Waiting for QR code...")


@router.post("/logout", response_model=SuccessResponse)
async def logout(
    coordinator: SessionCoordinator = Depends(get_session_coordinator),
) -> SuccessResponse:
    """Log out of WhatsApp and erase the stored credentials."""
    await coordinator.logout()
    get_api_logger().info("Session closed via API")
    return SuccessResponse(message="Session closed")


@router.post("/connect", response_model=ConnectResponse, response_model_by_alias=True)
async def connect(
    coordinator: SessionCoordinator = Depends(get_session_coordinator),
) -> ConnectResponse:
    """
    Start a new session after a logout or a stopped reconnect.

    Does nothing when a client is already live; the response always reflects
    the snapshot after the call.
    """
    snapshot = await coordinator.connect()
    return ConnectResponse(
        state=snapshot.state.value, status=StatusResponse(**snapshot.to_status())
    )

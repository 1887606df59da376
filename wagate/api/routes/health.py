"""
Health check endpoints for the gateway.
"""

import time
from typing import Any

from fastapi import APIRouter, Depends

from wagate.api.dependencies.session_dependencies import get_session_coordinator
from wagate.api.models.session_models import HealthResponse
from wagate.core.config.settings import settings
from wagate.core.session.coordinator import SessionCoordinator

router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(
    coordinator: SessionCoordinator = Depends(get_session_coordinator),
) -> HealthResponse:
    """Liveness probe; also reports whether WhatsApp is connected."""
    return HealthResponse(status="ok", connected=coordinator.snapshot.connected)


@router.get("/health/detailed")
async def detailed_health_check(
    coordinator: SessionCoordinator = Depends(get_session_coordinator),
) -> dict[str, Any]:
    """
    Detailed health check with session and configuration information.

    Useful for debugging and monitoring. Never includes the API key.
    """
    snapshot = coordinator.snapshot
    return {
        "status": "ok",
        "timestamp": time.time(),
        "session": {
            "state": snapshot.state.value,
            "connected": snapshot.connected,
            "phone": snapshot.phone,
            "has_qr": snapshot.has_qr,
            "generation": coordinator.generation,
            "retry_pending": coordinator.retry_pending,
        },
        "application": {
            "name": "wagate",
            "version": settings.version,
            "environment": settings.environment,
            "is_development": settings.is_development,
        },
        "configuration": {
            "log_level": settings.log_level,
            "auth_required": settings.auth_required,
            "auth_folder": settings.auth_folder,
            "bridge_url": settings.bridge_url,
            "reconnect_delay": settings.reconnect_delay,
            "send_timeout": settings.send_timeout,
        },
    }

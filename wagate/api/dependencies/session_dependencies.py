"""
Session dependency injection.

The coordinator is created once by the core plugin's startup hook and lives on
app.state; routes receive it through FastAPI's Depends.
"""

from fastapi import Request

from wagate.core.session.coordinator import SessionCoordinator


async def get_session_coordinator(request: Request) -> SessionCoordinator:
    """Get the application's session coordinator.

    Raises:
        RuntimeError: If the app was started without the core plugin
    """
    coordinator = getattr(request.app.state, "session_coordinator", None)
    if coordinator is None:
        raise RuntimeError("Session coordinator not initialized")
    return coordinator

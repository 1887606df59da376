"""API routers."""

from .health import router as health_router
from .messages import router as messages_router
from .qr_page import router as qr_page_router
from .session import router as session_router

__all__ = [
    "health_router",
    "messages_router",
    "qr_page_router",
    "session_router",
]

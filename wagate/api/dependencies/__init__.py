"""FastAPI dependencies."""

from .session_dependencies import get_session_coordinator

__all__ = ["get_session_coordinator"]

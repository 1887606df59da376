"""
WhatsApp session lifecycle.

Components:
- SessionCoordinator: owns the protocol client and the session snapshot
- ReconnectPolicy: decides whether and when to reconnect after a close
"""

from .coordinator import SendResult, SessionCoordinator
from .reconnection import ReconnectDecision, ReconnectionConfig, ReconnectPolicy

__all__ = [
    "SessionCoordinator",
    "SendResult",
    "ReconnectPolicy",
    "ReconnectionConfig",
    "ReconnectDecision",
]

"""
wagate - single-session WhatsApp gateway

Exposes a small authenticated HTTP API (status, QR pairing, send message,
logout) on top of one WhatsApp Web session kept alive by SessionCoordinator.
"""

from .core.config.settings import settings
from .core.factory import GatewayBuilder, GatewayPlugin
from .core.gateway_app import Gateway, create_app
from .core.session import SessionCoordinator

__version__ = settings.version

__all__ = [
    "Gateway",
    "GatewayBuilder",
    "GatewayPlugin",
    "SessionCoordinator",
    "create_app",
]

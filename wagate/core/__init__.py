"""
Gateway core: configuration, logging, session coordination, factory and plugins.
"""

from .config.settings import settings
from .factory import GatewayBuilder, GatewayPlugin
from .gateway_app import Gateway, create_app
from .logging import get_app_logger, get_logger, setup_app_logging
from .plugins import AuthPlugin, GatewayCorePlugin, create_bearer_auth_plugin
from .session import SessionCoordinator

__all__ = [
    "settings",
    "get_logger",
    "get_app_logger",
    "setup_app_logging",
    "GatewayBuilder",
    "GatewayPlugin",
    "Gateway",
    "create_app",
    "GatewayCorePlugin",
    "AuthPlugin",
    "create_bearer_auth_plugin",
    "SessionCoordinator",
]

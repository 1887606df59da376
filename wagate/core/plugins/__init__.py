"""
Gateway Plugins

- GatewayCorePlugin: logging, HTTP session, session coordinator, middleware, routes
- AuthPlugin: bearer token authentication for /api/
"""

from .auth_plugin import AuthPlugin, create_bearer_auth_plugin
from .core_plugin import GatewayCorePlugin

__all__ = [
    "AuthPlugin",
    "GatewayCorePlugin",
    "create_bearer_auth_plugin",
]

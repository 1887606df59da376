"""
Auth Plugin

Adds an authentication middleware to a gateway application.
"""

from typing import TYPE_CHECKING, Any

from wagate.api.middleware.auth import BearerAuthMiddleware

from ..logging.logger import get_app_logger

if TYPE_CHECKING:
    from ..factory.gateway_builder import GatewayBuilder


class AuthPlugin:
    """
    Authentication middleware plugin.

    Example:
        builder.add_plugin(AuthPlugin(BearerAuthMiddleware, api_key="secret"))
    """

    def __init__(
        self,
        auth_middleware_class: type,
        priority: int = 30,  # Inside request logging and error handling
        **middleware_kwargs: Any,
    ):
        self.auth_middleware_class = auth_middleware_class
        self.priority = priority
        self.middleware_kwargs = middleware_kwargs

    def configure(self, builder: "GatewayBuilder") -> None:
        builder.add_middleware(
            self.auth_middleware_class, priority=self.priority, **self.middleware_kwargs
        )
        get_app_logger().debug(
            f"AuthPlugin configured with {self.auth_middleware_class.__name__} "
            f"(priority: {self.priority})"
        )


def create_bearer_auth_plugin(api_key: str, **kwargs: Any) -> AuthPlugin:
    """
    Create the bearer token plugin protecting /api/.

    Args:
        api_key: Shared secret; empty disables the check
        **kwargs: Additional BearerAuthMiddleware arguments

    Returns:
        Configured AuthPlugin
    """
    return AuthPlugin(BearerAuthMiddleware, api_key=api_key, **kwargs)

"""
Gateway Plugin Protocol

Defines the interface that all gateway plugins implement for consistent
integration with the GatewayBuilder factory system.
"""

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from .gateway_builder import GatewayBuilder


class GatewayPlugin(Protocol):
    """
    Plugin interface for extending the gateway application.

    A plugin only registers components. Work that must run when the
    application starts or stops is registered as a prioritized hook, so the
    builder's lifespan decides the order across all plugins:

        def configure(self, builder):
            builder.add_middleware(MyMiddleware, priority=40)
            builder.add_startup_hook(self._open_pool, priority=30)
            builder.add_shutdown_hook(self._close_pool, priority=30)
    """

    def configure(self, builder: "GatewayBuilder") -> None:
        """
        Configure the plugin with the GatewayBuilder.

        Synchronous: only registers middleware, routers, exception handlers
        and startup/shutdown hooks with the builder.

        Args:
            builder: GatewayBuilder instance to configure
        """
        ...

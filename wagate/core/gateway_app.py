"""
Main gateway application class.

Gateway wires GatewayCorePlugin and the bearer auth plugin into a
GatewayBuilder and runs the result with uvicorn.
"""

from collections.abc import Callable
from typing import TYPE_CHECKING

import uvicorn
from fastapi import FastAPI

from .config.settings import settings
from .factory.gateway_builder import GatewayBuilder
from .logging.logger import get_app_logger
from .plugins.auth_plugin import create_bearer_auth_plugin
from .plugins.core_plugin import GatewayCorePlugin

if TYPE_CHECKING:
    from .factory.plugin import GatewayPlugin


class Gateway:
    """
    The WhatsApp gateway application.

    Simple Usage:
        Gateway().run()

    Advanced Usage:
        gateway = Gateway(api_key="secret")
        gateway.add_startup_hook(my_startup, priority=30)
        app = gateway.create_app()
    """

    def __init__(
        self,
        api_key: str | None = None,
        core_plugin: GatewayCorePlugin | None = None,
        config: dict | None = None,
    ):
        """
        Args:
            api_key: Shared secret for /api/ (defaults to settings.api_key)
            core_plugin: Preconfigured core plugin, e.g. with a custom store
            config: Optional FastAPI constructor overrides
        """
        self.api_key = settings.api_key if api_key is None else api_key
        self.config = config or {}
        self._app: FastAPI | None = None

        self._builder = GatewayBuilder()
        self._builder.add_plugin(core_plugin or GatewayCorePlugin())
        self._builder.add_plugin(create_bearer_auth_plugin(self.api_key))

    def add_plugin(self, plugin: "GatewayPlugin") -> "Gateway":
        self._builder.add_plugin(plugin)
        return self

    def add_startup_hook(self, hook: Callable, priority: int = 50) -> "Gateway":
        self._builder.add_startup_hook(hook, priority)
        return self

    def add_shutdown_hook(self, hook: Callable, priority: int = 50) -> "Gateway":
        self._builder.add_shutdown_hook(hook, priority)
        return self

    def create_app(self) -> FastAPI:
        """Build (once) and return the FastAPI application."""
        if self._app is not None:
            return self._app

        self._builder.configure(
            title="wagate",
            description="Single-session WhatsApp gateway",
            version=settings.version,
            docs_url="/docs" if settings.is_development else None,
            redoc_url="/redoc" if settings.is_development else None,
            openapi_url="/openapi.json" if settings.is_development else None,
        )
        if self.config:
            self._builder.configure(**self.config)

        self._app = self._builder.build()
        get_app_logger().debug(
            f"Gateway app created - plugins: {len(self._builder.plugins)}, "
            f"auth: {'on' if self.api_key else 'off'}"
        )
        return self._app

    @property
    def asgi(self) -> FastAPI:
        """ASGI application for uvicorn import strings."""
        return self.create_app()

    def run(self, host: str = "0.0.0.0", port: int | None = None, **kwargs) -> None:
        """
        Run the gateway with uvicorn in this process.

        Args:
            host: Host to bind to
            port: Port to bind to (defaults to settings.port)
            **kwargs: Additional uvicorn configuration
        """
        port = settings.port if port is None else port
        app = self.create_app()

        logger = get_app_logger()
        logger.info(f"Starting wagate v{settings.version} on {host}:{port}")

        uvicorn.run(
            app,
            host=host,
            port=port,
            log_level=settings.log_level.lower(),
            **kwargs,
        )


def create_app() -> FastAPI:
    """Application factory used by `uvicorn --factory` and the CLI."""
    return Gateway().create_app()

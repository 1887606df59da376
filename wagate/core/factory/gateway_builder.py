"""
GatewayBuilder - FastAPI Application Factory

Builds the gateway's FastAPI application from plugins, middleware, routers,
exception handlers and prioritized lifespan hooks.
"""

from collections.abc import Callable
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any

from fastapi import FastAPI

from ..logging.logger import get_app_logger

if TYPE_CHECKING:
    from .plugin import GatewayPlugin


class GatewayBuilder:
    """
    Fluent builder for the gateway application.

    Supports:
    - Plugins that register middleware, routes and lifecycle hooks
    - Priority-based middleware ordering
    - Exception handler registration
    - Prioritized startup/shutdown hooks in one lifespan

    Example:
        app = (GatewayBuilder()
            .add_plugin(GatewayCorePlugin())
            .add_plugin(create_bearer_auth_plugin("secret"))
            .configure(title="My Gateway")
            .build())
    """

    def __init__(self):
        """Initialize GatewayBuilder with empty configuration."""
        self.plugins: list[GatewayPlugin] = []
        self.middlewares: list[tuple[type, dict, int]] = []  # (class, kwargs, priority)
        self.routers: list[tuple[Any, dict]] = []  # (router, include_kwargs)
        self.exception_handlers: list[tuple[type[Exception], Callable]] = []
        self.startup_hooks: list[tuple[Callable, int]] = []  # (hook, priority)
        self.shutdown_hooks: list[tuple[Callable, int]] = []  # (hook, priority)
        self.config_overrides: dict[str, Any] = {}

    def add_plugin(self, plugin: "GatewayPlugin") -> "GatewayBuilder":
        """
        Add a plugin to extend functionality.

        Args:
            plugin: GatewayPlugin instance to add

        Returns:
            Self for method chaining
        """
        self.plugins.append(plugin)
        return self

    def add_middleware(
        self, middleware_class: type, priority: int = 50, **kwargs: Any
    ) -> "GatewayBuilder":
        """
        Add middleware to the application with priority ordering.

        Priority determines execution order:
        - Lower numbers run first (outer middleware)
        - Higher numbers run last (inner middleware)

        Args:
            middleware_class: Middleware class to add
            priority: Execution priority (lower = outer, higher = inner)
            **kwargs: Middleware configuration parameters

        Returns:
            Self for method chaining
        """
        self.middlewares.append((middleware_class, kwargs, priority))
        return self

    def add_router(self, router: Any, **kwargs: Any) -> "GatewayBuilder":
        """
        Add a router to the application.

        Args:
            router: FastAPI router to include
            **kwargs: Arguments for app.include_router()

        Returns:
            Self for method chaining
        """
        self.routers.append((router, kwargs))
        return self

    def add_exception_handler(
        self, exc_class: type[Exception], handler: Callable
    ) -> "GatewayBuilder":
        """Register an exception handler on the built app."""
        self.exception_handlers.append((exc_class, handler))
        return self

    def add_startup_hook(self, hook: Callable, priority: int = 50) -> "GatewayBuilder":
        """
        Add a startup hook to unified lifespan management.

        Lower priority numbers execute first.

        Priority Guidelines:
        - 10: Core system initialization (logging, HTTP session)
        - 20: WhatsApp session coordinator
        - 50: User hooks (default)

        Args:
            hook: Async callable that takes (app: FastAPI) -> None
            priority: Execution priority (lower = runs first)

        Returns:
            Self for method chaining
        """
        self.startup_hooks.append((hook, priority))
        return self

    def add_shutdown_hook(self, hook: Callable, priority: int = 50) -> "GatewayBuilder":
        """
        Add a shutdown hook to unified lifespan management.

        Higher priority numbers execute first during shutdown.

        Args:
            hook: Async callable that takes (app: FastAPI) -> None
            priority: Execution priority (higher = runs first in shutdown)

        Returns:
            Self for method chaining
        """
        self.shutdown_hooks.append((hook, priority))
        return self

    def configure(self, **overrides: Any) -> "GatewayBuilder":
        """
        Override default FastAPI configuration.

        Args:
            **overrides: FastAPI constructor arguments to override

        Returns:
            Self for method chaining
        """
        self.config_overrides.update(overrides)
        return self

    def build(self) -> FastAPI:
        """
        Build the configured FastAPI application.

        1. Configure plugins (sync setup only)
        2. Create FastAPI app with lifespan and config
        3. Add all middleware
        4. Register exception handlers
        5. Include all routers

        Returns:
            FastAPI application with configured plugins
        """
        logger = get_app_logger()
        logger.debug(f"Building FastAPI app with {len(self.plugins)} plugins")

        for plugin in self.plugins:
            plugin.configure(self)

        @asynccontextmanager
        async def unified_lifespan(app: FastAPI):
            try:
                await self._execute_all_startup_hooks(app)
                logger.info("All startup hooks completed successfully")
                yield
            except Exception as e:
                logger.error(f"Error during startup phase: {e}", exc_info=True)
                raise
            finally:
                await self._execute_all_shutdown_hooks(app)
                logger.info("All shutdown hooks completed")

        default_config = {
            "title": "wagate",
            "description": "Single-session WhatsApp gateway",
            "version": "1.0.0",
            "lifespan": unified_lifespan,
        }
        default_config.update(self.config_overrides)

        app = FastAPI(**default_config)

        # Reverse order because FastAPI wraps middleware added later around earlier ones
        sorted_middlewares = sorted(self.middlewares, key=lambda x: x[2], reverse=True)
        for middleware_class, kwargs, priority in sorted_middlewares:
            app.add_middleware(middleware_class, **kwargs)
            logger.debug(
                f"Added middleware {middleware_class.__name__} (priority: {priority})"
            )

        for exc_class, handler in self.exception_handlers:
            app.add_exception_handler(exc_class, handler)

        for router, kwargs in self.routers:
            app.include_router(router, **kwargs)

        logger.debug(
            f"GatewayBuilder created FastAPI app: {len(self.plugins)} plugins, "
            f"{len(self.middlewares)} middlewares, {len(self.routers)} routers"
        )

        return app

    async def _execute_all_startup_hooks(self, app: FastAPI) -> None:
        """Execute all startup hooks in priority order, failing fast."""
        logger = get_app_logger()

        for hook, priority in sorted(self.startup_hooks, key=lambda x: x[1]):
            hook_name = getattr(hook, "__name__", "anonymous_hook")
            logger.debug(f"Executing startup hook: {hook_name} (priority: {priority})")
            try:
                await hook(app)
            except Exception as e:
                logger.error(f"Startup hook {hook_name} failed: {e}", exc_info=True)
                raise

    async def _execute_all_shutdown_hooks(self, app: FastAPI) -> None:
        """Execute all shutdown hooks in reverse priority order, isolating errors."""
        logger = get_app_logger()

        for hook, priority in sorted(
            self.shutdown_hooks, key=lambda x: x[1], reverse=True
        ):
            hook_name = getattr(hook, "__name__", "anonymous_hook")
            try:
                logger.debug(
                    f"Executing shutdown hook: {hook_name} (priority: {priority})"
                )
                await hook(app)
            except Exception as e:
                # Don't re-raise in shutdown - log and continue with other hooks
                logger.error(f"Error in shutdown hook {hook_name}: {e}", exc_info=True)

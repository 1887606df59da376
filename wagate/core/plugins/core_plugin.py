"""
Gateway Core Plugin

Everything the gateway needs to run: logging, the shared HTTP session, the
credential store, the session coordinator, the core middleware stack and the
routes. GatewayBuilder applications get all of it by adding this one plugin.
"""

from typing import TYPE_CHECKING

import aiohttp
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError

from wagate.api.middleware.error_handler import ErrorHandlerMiddleware
from wagate.api.middleware.request_logging import RequestLoggingMiddleware
from wagate.api.routes import (
    health_router,
    messages_router,
    qr_page_router,
    session_router,
)
from wagate.api.utils.error_helpers import (
    gateway_error_handler,
    validation_error_handler,
)
from wagate.core.exceptions import GatewayError, StoreUnavailable
from wagate.core.session.coordinator import SessionCoordinator
from wagate.core.session.reconnection import ReconnectionConfig, ReconnectPolicy
from wagate.domain.interfaces.credential_store import ICredentialStore
from wagate.domain.interfaces.protocol_client import ProtocolClientFactory
from wagate.messaging.whatsapp.bridge import create_bridge_client_factory
from wagate.persistence.credentials import FileCredentialStore

from ..config.settings import settings
from ..logging.logger import get_app_logger, setup_app_logging

if TYPE_CHECKING:
    from ..factory.gateway_builder import GatewayBuilder


class GatewayCorePlugin:
    """
    Core gateway functionality as a plugin.

    Startup (priority 10, 20):
    - Application logging setup
    - Persistent aiohttp session on app.state.http_session
    - SessionCoordinator on app.state.session_coordinator, started immediately

    Shutdown runs in reverse: the coordinator closes its client (without
    logging out) before the HTTP session is closed.

    Args:
        store: Credential store; defaults to FileCredentialStore(settings.auth_folder)
        client_factory: Protocol client factory; defaults to the WhatsApp bridge
        print_qr_in_terminal: Also log pairing QR codes as ASCII art
    """

    def __init__(
        self,
        store: ICredentialStore | None = None,
        client_factory: ProtocolClientFactory | None = None,
        print_qr_in_terminal: bool = True,
    ):
        self.store = store
        self.client_factory = client_factory
        self.print_qr_in_terminal = print_qr_in_terminal

    def configure(self, builder: "GatewayBuilder") -> None:
        """
        Register core middleware, exception handlers, routes and hooks.

        Args:
            builder: GatewayBuilder instance to configure
        """
        logger = get_app_logger()
        logger.debug("Configuring GatewayCorePlugin...")

        builder.add_middleware(RequestLoggingMiddleware, priority=10)  # Outer
        builder.add_middleware(ErrorHandlerMiddleware, priority=20)

        builder.add_exception_handler(GatewayError, gateway_error_handler)
        builder.add_exception_handler(RequestValidationError, validation_error_handler)

        builder.add_router(health_router)
        builder.add_router(session_router)
        builder.add_router(messages_router)
        builder.add_router(qr_page_router)

        builder.add_startup_hook(self._core_startup, priority=10)
        builder.add_startup_hook(self._session_startup, priority=20)
        builder.add_shutdown_hook(self._session_shutdown, priority=80)
        builder.add_shutdown_hook(self._core_shutdown, priority=10)

        logger.debug("GatewayCorePlugin configured - middleware: 2, routes: 4, hooks: 4")

    async def _core_startup(self, app: FastAPI) -> None:
        """
        Logging and the shared HTTP session.

        Runs first so every later hook can log and reach the bridge.
        """
        logger = None
        try:
            setup_app_logging()
            logger = get_app_logger()

            logger.info(f"Starting wagate v{settings.version}")
            logger.info(f"Environment: {settings.environment}")
            logger.info(f"Log level: {settings.log_level}")
            if settings.is_development:
                logger.info(f"Development mode - logs: {settings.log_dir}")

            if not settings.auth_required:
                logger.warning(
                    "API_KEY is empty: /api/ endpoints are open to anyone who can "
                    "reach this port"
                )

            connector = aiohttp.TCPConnector(
                limit=20, keepalive_timeout=30, enable_cleanup_closed=True
            )
            app.state.http_session = aiohttp.ClientSession(
                connector=connector, timeout=aiohttp.ClientTimeout(total=30)
            )
            logger.debug("Persistent HTTP session created")

            base_url = f"http://localhost:{settings.port}"
            logger.info("=== AVAILABLE ENDPOINTS ===")
            logger.info(f"Health Check: {base_url}/health")
            logger.info(f"QR Page: {base_url}/qr")
            logger.info(f"Status: {base_url}/api/status")
            logger.info(f"Send Message: POST {base_url}/api/send-message")
            logger.info("============================")

        except Exception as e:
            if logger:
                logger.error(f"Error during core startup: {e}", exc_info=True)
            else:
                print(f"Critical error during logging setup: {e}")
            raise

    async def _session_startup(self, app: FastAPI) -> None:
        """Build the session coordinator and start connecting to WhatsApp."""
        logger = get_app_logger()

        store = self.store or FileCredentialStore(settings.auth_folder)
        client_factory = self.client_factory or create_bridge_client_factory(
            app.state.http_session,
            base_url=settings.bridge_url,
            browser_name=settings.browser_name,
        )
        policy = ReconnectPolicy(
            ReconnectionConfig(
                base_delay=settings.reconnect_delay,
                max_delay=settings.reconnect_max_delay,
                max_attempts=settings.reconnect_max_attempts,
            )
        )

        coordinator = SessionCoordinator(
            store,
            client_factory,
            policy=policy,
            send_timeout=settings.send_timeout,
            print_qr_in_terminal=self.print_qr_in_terminal,
        )
        app.state.session_coordinator = coordinator

        try:
            await coordinator.start()
        except StoreUnavailable as e:
            # Keep serving status and /api/connect so the operator can fix it
            logger.error(f"Cannot read stored credentials, not connecting: {e}")

    async def _session_shutdown(self, app: FastAPI) -> None:
        coordinator = getattr(app.state, "session_coordinator", None)
        if coordinator is not None:
            await coordinator.close()
            get_app_logger().info("WhatsApp session closed")

    async def _core_shutdown(self, app: FastAPI) -> None:
        logger = get_app_logger()
        try:
            if hasattr(app.state, "http_session"):
                await app.state.http_session.close()
                logger.info("Persistent HTTP session closed cleanly")
            logger.info("Core shutdown completed")
        except Exception as e:
            logger.error(f"Error during core shutdown: {e}", exc_info=True)

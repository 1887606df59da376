"""
Request and response logging middleware.

Tags every request with a short request id in the log context and logs
method, path, status and timing. Credentials are never logged.
"""

import time
import uuid

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from wagate.core.config.settings import settings
from wagate.core.logging.context import set_log_context
from wagate.core.logging.logger import get_logger


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware for logging HTTP requests and responses with context.

    Features:
    - Request id in the log context
    - Request/response timing
    - Health checks and docs are skipped to reduce noise
    """

    SKIP_PATHS = ("/health", "/docs", "/redoc", "/openapi.json", "/favicon.ico")

    def __init__(self, app, log_requests: bool = True, log_responses: bool = True):
        super().__init__(app)
        self.log_requests = log_requests
        self.log_responses = log_responses

    async def dispatch(self, request: Request, call_next) -> Response:
        start_time = time.time()

        request_id = request.headers.get("x-request-id") or uuid.uuid4().hex[:8]
        coordinator = getattr(request.app.state, "session_coordinator", None)
        phone = coordinator.snapshot.phone if coordinator is not None else None
        set_log_context(phone=phone, request_id=request_id)
        logger = get_logger(__name__)

        skip = self._should_skip_logging(request.url.path)
        if self.log_requests and not skip:
            client_host = request.client.host if request.client else "unknown"
            logger.info(f"Incoming {request.method} {request.url.path} from {client_host}")

        response = await call_next(request)

        process_time = time.time() - start_time
        response.headers["X-Request-ID"] = request_id
        if settings.is_development:
            response.headers["X-Process-Time"] = str(round(process_time * 1000, 2))

        if self.log_responses and not skip:
            self._log_response(request, response, process_time, logger)

        return response

    def _should_skip_logging(self, path: str) -> bool:
        return path.startswith(self.SKIP_PATHS)

    def _log_response(
        self, request: Request, response: Response, process_time: float, logger
    ) -> None:
        status_code = response.status_code

        if status_code >= 500:
            log_level = "error"
        elif status_code >= 400:
            log_level = "warning"
        else:
            log_level = "info"

        getattr(logger, log_level)(
            f"Response {status_code} for {request.method} {request.url.path} "
            f"({round(process_time * 1000, 2)}ms)"
        )

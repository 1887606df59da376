"""
Bearer token authentication middleware.

Protects every route under /api/ with a shared secret. With no secret
configured the middleware lets everything through.
"""

import secrets

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from wagate.core.exceptions import Unauthorized
from wagate.core.logging.logger import get_logger


class BearerAuthMiddleware(BaseHTTPMiddleware):
    """
    Checks `Authorization: Bearer <api_key>` on protected paths.

    Example:
        builder.add_middleware(BearerAuthMiddleware, priority=20, api_key="secret")
    """

    def __init__(self, app, api_key: str = "", protected_prefix: str = "/api/"):
        super().__init__(app)
        self.api_key = api_key
        self.protected_prefix = protected_prefix

    async def dispatch(self, request: Request, call_next) -> Response:
        if not self.api_key or not request.url.path.startswith(self.protected_prefix):
            return await call_next(request)

        if not self._is_authorized(request.headers.get("authorization", "")):
            get_logger(__name__).warning(
                f"Rejected unauthorized {request.method} {request.url.path}"
            )
            error = Unauthorized()
            return JSONResponse(
                status_code=error.status_code, content={"error": error.message}
            )

        return await call_next(request)

    def _is_authorized(self, header: str) -> bool:
        scheme, _, token = header.partition(" ")
        if scheme != "Bearer" or not token:
            return False
        return secrets.compare_digest(token.encode(), self.api_key.encode())

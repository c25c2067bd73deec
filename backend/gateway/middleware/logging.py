"""
Event Gateway: Request Logging Middleware
==========================================

What:  One access log line per request: method, path, status, duration,
       request ID and client IP.
How:   Level follows the status class. A successful request slower than
       `slow_request_ms` is logged at WARNING, since that time is spent
       waiting on a collaborator (GraphQL engine, Cloudinary, Chapa, SMTP).

Request bodies are never logged: they carry passwords, images and payment
details.
"""

import logging
import time
from typing import Iterable, Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from gateway.config import Settings, settings as default_settings
from gateway.middleware.request_id import request_id_var

logger = logging.getLogger("gateway.access")


def level_for(status: int, duration_ms: float, slow_ms: float) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400 or duration_ms > slow_ms:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    DEFAULT_QUIET_PATHS = ("/health",)

    def __init__(
        self,
        app,
        settings: Optional[Settings] = None,
        quiet_paths: Optional[Iterable[str]] = None,
    ):
        super().__init__(app)
        self.settings = settings or default_settings
        self.quiet_paths = set(quiet_paths or self.DEFAULT_QUIET_PATHS)

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in self.quiet_paths:
            return await call_next(request)

        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000

        rid = request_id_var.get("")
        client_ip = request.client.host if request.client else "unknown"
        status = response.status_code
        slow = status < 400 and elapsed_ms > self.settings.slow_request_ms

        logger.log(
            level_for(status, elapsed_ms, self.settings.slow_request_ms),
            "%s %s %d %.1fms [%s] from %s%s",
            request.method,
            request.url.path,
            status,
            elapsed_ms,
            rid,
            client_ip,
            " (slow)" if slow else "",
            extra={
                "request_id": rid,
                "method": request.method,
                "path": request.url.path,
                "status": status,
                "duration_ms": round(elapsed_ms, 2),
                "client_ip": client_ip,
            },
        )
        return response

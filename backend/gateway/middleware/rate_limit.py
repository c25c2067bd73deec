"""
Event Gateway: Rate Limiting Middleware
========================================

What:  Per-IP sliding window limit on the credential endpoints.
How:   Keeps recent request timestamps per (IP, path) in memory. Only
       /login and /signup are limited; other actions are called by the
       GraphQL engine or event triggers, not directly by end users.

Algorithm: Sliding Window Log
    1. Drop timestamps older than the window
    2. If the remaining count >= limit, reject with 429 and Retry-After
    3. Otherwise record now and pass the request through

State is per process. Behind several workers each worker counts on its own,
so the effective limit is `limit × workers`.
"""

import logging
import time
from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Tuple

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from gateway.config import Settings, settings as default_settings
from gateway.exceptions import RateLimitExceededError

logger = logging.getLogger(__name__)


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Configuration (from settings):
        rate_limit_requests: Max requests per window per IP and path
        rate_limit_window:   Window duration in seconds
    """

    DEFAULT_PATHS = ("/login", "/signup")

    def __init__(
        self,
        app,
        settings: Optional[Settings] = None,
        paths: Optional[Iterable[str]] = None,
    ):
        super().__init__(app)
        self.settings = settings or default_settings
        self.paths = set(paths or self.DEFAULT_PATHS)
        self._requests: Dict[Tuple[str, str], List[float]] = defaultdict(list)
        self._seen = 0

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path not in self.paths:
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        key = (client_ip, path)
        limit = self.settings.rate_limit_requests
        window = self.settings.rate_limit_window

        now = time.time()
        window_start = now - window
        self._requests[key] = [ts for ts in self._requests[key] if ts > window_start]

        if len(self._requests[key]) >= limit:
            oldest = self._requests[key][0]
            retry_after = int(oldest + window - now) + 1
            logger.warning(
                "Rate limit exceeded for %s on %s: %d requests in %ds window",
                client_ip,
                path,
                len(self._requests[key]),
                window,
            )
            error = RateLimitExceededError(retry_after=retry_after)
            return JSONResponse(
                status_code=error.status_code,
                content={"message": error.message},
                headers={"Retry-After": str(retry_after)},
            )

        self._requests[key].append(now)

        self._seen += 1
        if self._seen % 1000 == 0:
            self._cleanup_inactive(window_start)

        return await call_next(request)

    def _cleanup_inactive(self, window_start: float) -> None:
        """Drop keys with no request inside the current window."""
        inactive = [
            key for key, timestamps in self._requests.items()
            if not timestamps or timestamps[-1] < window_start
        ]
        for key in inactive:
            del self._requests[key]
        if inactive:
            logger.debug("Cleaned up %d inactive rate limit entries", len(inactive))

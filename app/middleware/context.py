"""
Per-request logging context and timing.

Every request gets a request id (the client's X-Request-ID when it is safe
to reuse, otherwise a fresh one) that is bound to structlog for the
duration of the request, so provider failures and placeholder fallbacks
logged deep inside a handler can be traced back to the call that caused them.

Response headers:
- X-Request-ID: the id used in the logs
- X-Response-Time: handler duration, e.g. "12.3ms"
"""

import re
import time
import uuid

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

logger = structlog.get_logger(__name__)

# The stats endpoints wait on GitHub/WakaTime, so anything under this is normal
SLOW_REQUEST_THRESHOLD_MS = 2000.0

SKIP_PATHS = frozenset({"/health", "/favicon.ico"})

# Client-provided ids end up in log lines
REQUEST_ID_PATTERN = re.compile(r"^[A-Za-z0-9_\-]{1,64}$")
UUID_SEGMENT = re.compile(r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$")


def new_request_id() -> str:
    return f"req_{uuid.uuid4().hex[:16]}"


def route_label(method: str, path: str) -> str:
    """
    Group requests by route rather than by row.

    /api/v1/articles/6f1c...-.../html -> "GET /api/v1/articles/{id}/html"
    """
    parts = ["{id}" if UUID_SEGMENT.match(part) else part for part in path.rstrip("/").split("/")]
    return f"{method} {'/'.join(parts) or '/'}"


class RequestContextMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        if request.url.path in SKIP_PATHS:
            return await call_next(request)

        client_id = request.headers.get("X-Request-ID")
        request_id = client_id if client_id and REQUEST_ID_PATTERN.match(client_id) else new_request_id()
        request.state.request_id = request_id

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            route=route_label(request.method, request.url.path),
        )

        start = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            elapsed_ms = (time.perf_counter() - start) * 1000
            response.headers["X-Request-ID"] = request_id
            response.headers["X-Response-Time"] = f"{elapsed_ms:.1f}ms"
            return response
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            if status_code >= 500:
                logger.error("Request failed", status_code=status_code, duration_ms=round(elapsed_ms, 1))
            elif elapsed_ms >= SLOW_REQUEST_THRESHOLD_MS:
                logger.warning("Slow request", status_code=status_code, duration_ms=round(elapsed_ms, 1))
            structlog.contextvars.clear_contextvars()

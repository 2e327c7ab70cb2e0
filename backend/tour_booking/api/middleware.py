"""
Request middleware: request ids, per-request log lines and HTTP metrics.
"""

import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
import structlog

from tour_booking.core.logging import get_logger
from tour_booking.core.metrics import record_http_request

logger = get_logger(__name__)

# Probe endpoints are scraped constantly; keep them out of the info log
QUIET_PATHS = frozenset({"/health", "/metrics"})


def route_template(request: Request) -> str:
    """'/api/bookings/{booking_id}' rather than '/api/bookings/42', to bound metric labels."""
    route = request.scope.get("route")
    return getattr(route, "path", None) or "unmatched"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Assigns a request id, binds it with method and path to the structlog
    context, and logs one line per request with status and duration.
    Clients may supply their own id in X-Request-ID.
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex[:8]
        path = request.url.path
        started = time.perf_counter()

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=path,
        )

        try:
            response = await call_next(request)
        except Exception as e:
            elapsed = time.perf_counter() - started
            record_http_request(request.method, route_template(request), 500, elapsed)
            logger.error(
                "request_failed",
                error=str(e),
                exc_type=type(e).__name__,
                duration_ms=round(elapsed * 1000, 2),
                exc_info=True,
            )
            raise

        elapsed = time.perf_counter() - started
        duration_ms = round(elapsed * 1000, 2)
        record_http_request(request.method, route_template(request), response.status_code, elapsed)

        if response.status_code >= 500:
            log = logger.warning
        elif path in QUIET_PATHS:
            log = logger.debug
        else:
            log = logger.info
        log("request_completed", status_code=response.status_code, duration_ms=duration_ms)

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Response-Time"] = f"{duration_ms}ms"
        return response

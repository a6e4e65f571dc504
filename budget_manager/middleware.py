"""
Request timing middleware for the backend API
Emits budget_manager.endpoint.stop for every request
"""
import time

from starlette.middleware.base import BaseHTTPMiddleware

from . import telemetry
from .utils.logger import get_logger

logger = get_logger(__name__)


class TelemetryMiddleware(BaseHTTPMiddleware):
    """
    Time each request and report it to telemetry

    Metadata: method, route (matched route path when known, else URL path), status
    """

    async def dispatch(self, request, call_next):
        started = time.perf_counter()
        status = 500
        try:
            response = await call_next(request)
            status = response.status_code
            return response
        finally:
            duration = (time.perf_counter() - started) * 1000
            route = request.scope.get("route")
            telemetry.execute(
                "budget_manager.endpoint.stop",
                {"duration": duration},
                {
                    "method": request.method,
                    "route": getattr(route, "path", request.url.path),
                    "status": status,
                },
            )
            logger.debug(f"{request.method} {request.url.path} -> {status} ({duration:.1f}ms)")

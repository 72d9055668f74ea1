"""
Access log for the locations API.

One line per request with the resolved product, so tenant traffic can be told
apart. 5xx responses log at WARNING and 4xx at INFO. The /health and /metrics
checks log only at DEBUG so they do not drown out real traffic. Status and
latency feed the in-memory metrics.
"""
import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from src.monitoring.metrics import record_request

logger = logging.getLogger(__name__)

QUIET_PATHS = frozenset({"/health", "/metrics", "/favicon.ico"})


def _log_level(path: str, status_code: int) -> int:
    if status_code >= 500:
        return logging.WARNING
    if path in QUIET_PATHS:
        return logging.DEBUG
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000
        path = request.url.path
        if path not in QUIET_PATHS:
            record_request(response.status_code, duration_ms)
        logger.log(
            _log_level(path, response.status_code),
            "request method=%s path=%s query=%s status=%s duration_ms=%.1f product=%s",
            request.method,
            path,
            request.url.query or "-",
            response.status_code,
            duration_ms,
            getattr(request.state, "product", "-"),
        )
        return response

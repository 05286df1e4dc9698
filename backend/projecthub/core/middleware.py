"""
Per-request log context.
"""

import time
import uuid
from typing import Callable

import structlog
from projecthub.core.logging import get_logger
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"

# Пробы оркестратора не логируем
_SILENT_PATHS = frozenset({"/health", "/health/ready"})


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Binds ``request_id``, method, path and client address to structlog
    contextvars, then logs one ``request_completed`` line with the duration.

    An incoming ``X-Request-ID`` is reused so ids can be correlated with a
    proxy; otherwise a short random id is generated. The id is echoed back.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex[:12]

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
            client_ip=request.client.host if request.client else "unknown",
        )

        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception as exc:
            logger.error(
                "request_failed",
                error_type=type(exc).__name__,
                duration_ms=round((time.perf_counter() - started) * 1000, 2),
            )
            raise

        if request.url.path not in _SILENT_PATHS:
            log = logger.warning if response.status_code >= 500 else logger.info
            log(
                "request_completed",
                status_code=response.status_code,
                duration_ms=round((time.perf_counter() - started) * 1000, 2),
            )
        response.headers[REQUEST_ID_HEADER] = request_id
        return response

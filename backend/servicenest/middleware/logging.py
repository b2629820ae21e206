"""
ServiceNest Backend — Request Logging Middleware
=================================================

What:  One access log line per HTTP request.
How:   Times the rest of the stack, then logs method, path, status,
       duration, request id and the caller: the verified uid when a
       protected route resolved one, otherwise "anonymous".
When:  Runs inside RequestIDMiddleware, so the request id is already set.

Never logged: request bodies (may contain personal data) and the
Authorization header.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from servicenest.middleware.request_id import request_id_var

logger = logging.getLogger("servicenest.access")

# Probes run every few seconds and would drown the log
QUIET_PATHS = {"/health"}


def _level_for(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs each request at ERROR (5xx), WARNING (4xx) or INFO."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in QUIET_PATHS:
            return await call_next(request)

        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000

        # Set by require_identity; request.state is shared with the route
        identity = getattr(request.state, "identity", None)
        caller = identity.uid if identity is not None else "anonymous"

        logger.log(
            _level_for(response.status_code),
            "%s %s %d %.1fms [%s] caller=%s",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
            request_id_var.get(""),
            caller,
            extra={
                "request_id": request_id_var.get(""),
                "caller": caller,
                "status": response.status_code,
                "duration_ms": round(elapsed_ms, 2),
            },
        )
        return response

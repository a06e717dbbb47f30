"""
CafeStaff Backend — Request Logging Middleware
================================================

What:  One access log line per HTTP request, with status and duration.
How:   Measures the time around call_next and logs on the
       "cafestaff.access" logger at a level chosen by status class.
When:  Runs inside RequestIDMiddleware, so the request ID is already set.

Log line:
    PUT /api/employees/UI4K7Q2ZB 200 12.3ms [a1b2c3d4] from 192.168.1.100

The same fields are attached as `extra` for structured handlers.
Request bodies are never logged (they carry employee contact details).
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from cafestaff.middleware.request_id import request_id_var

logger = logging.getLogger("cafestaff.access")

# Probed every few seconds by load balancers
QUIET_PATHS = {"/health"}


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Level by status:
        5xx → ERROR
        4xx → WARNING
        else → INFO
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path in QUIET_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        client_ip = request.client.host if request.client else "unknown"
        method = request.method
        rid = request_id_var.get("")

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000
        status = response.status_code
        if status >= 500:
            log_level = logging.ERROR
        elif status >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        logger.log(
            log_level,
            "%s %s %d %.1fms [%s] from %s",
            method,
            path,
            status,
            duration_ms,
            rid,
            client_ip,
            extra={
                "request_id": rid,
                "method": method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
            },
        )
        return response

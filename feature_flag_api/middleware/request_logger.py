"""
Request logging middleware

Logs one line per request: client IP, method, URI, route name and duration.
"""

import logging
import time

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from feature_flag_api.utils.logger import log_request

logger = logging.getLogger("feature_flag_api.access")


def get_client_ip(request: Request) -> str:
    """Client IP, forwarded headers first"""

    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded

    if request.client is not None:
        return request.client.host

    return ""


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Request logging middleware"""

    async def dispatch(self, request: Request, call_next):
        start_time = time.perf_counter()

        response = await call_next(request)

        route = request.scope.get("route")
        route_name = getattr(route, "name", "") or ""
        uri = request.url.path
        if request.url.query:
            uri = f"{uri}?{request.url.query}"

        log_request(
            logger,
            client_ip=get_client_ip(request),
            method=request.method,
            path=uri,
            route=route_name,
            status_code=response.status_code,
            duration_ms=(time.perf_counter() - start_time) * 1000,
        )

        return response

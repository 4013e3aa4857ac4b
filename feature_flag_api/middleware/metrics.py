"""
Metrics Collection Middleware for the Feature Flag API
"""

import logging
import time

from fastapi import Request
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Gauge, Histogram, generate_latest
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

# Prometheus metrics
REQUEST_COUNT = Counter(
    'feature_flag_api_requests_total',
    'Total number of requests',
    ['method', 'endpoint', 'status_code']
)

REQUEST_DURATION = Histogram(
    'feature_flag_api_request_duration_seconds',
    'Request duration in seconds',
    ['method', 'endpoint']
)

ACTIVE_REQUESTS = Gauge(
    'feature_flag_api_active_requests',
    'Number of active requests',
    ['endpoint']
)

FLAG_OPERATIONS = Counter(
    'feature_flag_api_flag_operations_total',
    'Feature flag operations',
    ['operation', 'outcome']
)

ACCESS_CHECKS = Counter(
    'feature_flag_api_access_checks_total',
    'Feature access checks',
    ['result']
)

ERROR_COUNT = Counter(
    'feature_flag_api_errors_total',
    'Total number of errors',
    ['error_type', 'endpoint']
)


class MetricsMiddleware(BaseHTTPMiddleware):
    """Metrics collection middleware"""

    async def dispatch(self, request: Request, call_next):
        """Collect metrics for each request"""

        start_time = time.time()
        endpoint = self._get_endpoint_label(request.url.path)
        method = request.method

        ACTIVE_REQUESTS.labels(endpoint=endpoint).inc()

        try:
            response = await call_next(request)

            duration = time.time() - start_time

            REQUEST_COUNT.labels(
                method=method,
                endpoint=endpoint,
                status_code=response.status_code
            ).inc()

            REQUEST_DURATION.labels(
                method=method,
                endpoint=endpoint
            ).observe(duration)

            response.headers["X-Response-Time"] = f"{duration:.3f}s"

            return response

        except Exception as e:
            ERROR_COUNT.labels(
                error_type=type(e).__name__,
                endpoint=endpoint
            ).inc()

            raise

        finally:
            ACTIVE_REQUESTS.labels(endpoint=endpoint).dec()

    def _get_endpoint_label(self, path: str) -> str:
        """Get normalized endpoint label"""

        # Feature keys are not used as labels
        if path.startswith("/features"):
            if path.rstrip("/") in ("/features", "/features/access"):
                return path.rstrip("/")
            if path.endswith("/access"):
                return "/features/{key}/access"
            return "/features/{key}"
        elif path.startswith("/health"):
            return "/health"
        elif path.startswith("/metrics"):
            return "/metrics"
        else:
            return "other"


class MetricsCollector:
    """Additional metrics collection utilities"""

    @staticmethod
    def record_flag_operation(operation: str, outcome: str):
        """Record a feature flag operation and its outcome"""

        FLAG_OPERATIONS.labels(operation=operation, outcome=outcome).inc()

    @staticmethod
    def record_access_check(granted: bool):
        """Record the result of an access check"""

        ACCESS_CHECKS.labels(result="granted" if granted else "denied").inc()


def get_metrics() -> bytes:
    """Get Prometheus metrics"""
    return generate_latest()


def get_metrics_content_type() -> str:
    """Get metrics content type"""
    return CONTENT_TYPE_LATEST

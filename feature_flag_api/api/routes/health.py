"""
Health Check API Routes for the Feature Flag API
"""

import logging
import time

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from feature_flag_api.core.errors import StoreError
from feature_flag_api.core.models import HealthStatus

logger = logging.getLogger(__name__)

router = APIRouter()

# Service start time for uptime calculation
SERVICE_START_TIME = time.time()


@router.get("/", response_model=HealthStatus)
def health_check():
    """Basic health check"""

    uptime = int(time.time() - SERVICE_START_TIME)

    return HealthStatus(
        status="healthy",
        uptime_seconds=uptime
    )


@router.get("/live")
def liveness_check():
    """Liveness check for Kubernetes"""
    return {"status": "alive", "timestamp": int(time.time())}


@router.get("/ready")
def readiness_check(request: Request):
    """Readiness check for Kubernetes"""

    service = getattr(request.app.state, "feature_service", None)
    if service is None:
        return JSONResponse(
            status_code=503,
            content={"status": "not_ready", "missing_service": "feature_service"}
        )

    try:
        service.store.ping()
    except StoreError as e:
        logger.error(f"Readiness check failed: {e}")
        return JSONResponse(
            status_code=503,
            content={"status": "not_ready", "error": str(e)}
        )

    return {"status": "ready"}

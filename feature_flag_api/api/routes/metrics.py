"""
Metrics API Routes for the Feature Flag API
"""

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

from feature_flag_api.middleware.metrics import get_metrics, get_metrics_content_type

router = APIRouter()


@router.get("/prometheus", response_class=PlainTextResponse)
def prometheus_metrics():
    """Prometheus metrics endpoint"""

    return PlainTextResponse(
        content=get_metrics(),
        media_type=get_metrics_content_type()
    )

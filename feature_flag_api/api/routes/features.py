"""
Feature Flags API
"""

from contextlib import contextmanager
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Request

from feature_flag_api.core.errors import FeatureFlagError, FlagValidationError
from feature_flag_api.core.models import AccessRequest, APIMessage, FeatureFlag, FeatureFlagUpdate
from feature_flag_api.feature_flags.service import FeatureService
from feature_flag_api.middleware.metrics import MetricsCollector

router = APIRouter()


def get_feature_service(request: Request) -> FeatureService:
    service = getattr(request.app.state, "feature_service", None)
    if service is None:
        raise HTTPException(status_code=503, detail="Feature service not available")
    return service


@contextmanager
def track(operation: str):
    """Record the outcome of a feature flag operation"""
    try:
        yield
    except FlagValidationError as e:
        MetricsCollector.record_flag_operation(operation, e.kind)
        raise
    except FeatureFlagError as e:
        MetricsCollector.record_flag_operation(operation, type(e).__name__)
        raise
    MetricsCollector.record_flag_operation(operation, "success")


@router.get("", response_model=List[FeatureFlag], name="FeatureIndex")
def list_features(service: FeatureService = Depends(get_feature_service)):
    with track("list"):
        return service.get_features()


@router.post("", response_model=FeatureFlag, status_code=201, name="FeatureCreate")
def create_feature(feature: FeatureFlag, service: FeatureService = Depends(get_feature_service)):
    with track("create"):
        return service.add_feature(feature)


@router.post("/access", response_model=List[FeatureFlag], name="FeaturesAccess")
def accessible_features(
    access_request: AccessRequest,
    service: FeatureService = Depends(get_feature_service),
):
    """Features the user or groups have access to"""
    with track("access"):
        return service.accessible_features(access_request)


@router.get("/{feature_key}", response_model=FeatureFlag, name="FeatureShow")
def show_feature(feature_key: str, service: FeatureService = Depends(get_feature_service)):
    with track("show"):
        return service.get_feature(feature_key)


@router.patch("/{feature_key}", response_model=FeatureFlag, name="FeatureEdit")
def edit_feature(
    feature_key: str,
    payload: FeatureFlagUpdate,
    service: FeatureService = Depends(get_feature_service),
):
    """Update the fields given in the payload"""
    with track("update"):
        return service.patch_feature(feature_key, payload)


@router.delete("/{feature_key}", response_model=APIMessage, name="FeatureRemove")
def remove_feature(feature_key: str, service: FeatureService = Depends(get_feature_service)):
    with track("remove"):
        service.remove_feature(feature_key)
    return APIMessage(status="feature_deleted", message="The feature was successfully deleted")


@router.post("/{feature_key}/access", response_model=APIMessage, name="FeatureAccess")
def feature_access(
    feature_key: str,
    access_request: AccessRequest,
    service: FeatureService = Depends(get_feature_service),
):
    """Tell if a user or groups have access to a feature"""
    with track("access"):
        granted = service.check_access(feature_key, access_request)

    MetricsCollector.record_access_check(granted)

    if granted:
        return APIMessage(status="has_access", message="The user has access to the feature")
    return APIMessage(status="not_access", message="The user does not have access to the feature")

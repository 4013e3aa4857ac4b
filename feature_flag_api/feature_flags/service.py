"""
Feature flag service

Validates feature flags and reads and writes them through a FlagStore.
Every operation runs inside exactly one store transaction: read-only for
queries, read-write for mutations.

Update merge policy: ``enabled`` is always overwritten, while ``users``,
``groups`` and ``percentage`` only replace the stored value when the overlay
value is non-empty (non-zero for the percentage). An update can therefore
not clear the users or groups of a feature nor reset its percentage to 0.
"""

from typing import List

from feature_flag_api.core import access
from feature_flag_api.core.errors import FlagAlreadyExistsError
from feature_flag_api.core.models import AccessRequest, FeatureFlag, FeatureFlagUpdate
from feature_flag_api.core.validation import validate
from feature_flag_api.storage.base import FlagStore
from feature_flag_api.utils.logger import get_logger

logger = get_logger(__name__, component="feature_service")


def merge_feature(stored: FeatureFlag, overlay: FeatureFlag) -> FeatureFlag:
    """Merge an update overlay onto a stored feature, keeping the stored key"""

    merged = stored.model_copy(deep=True)
    merged.enabled = overlay.enabled

    if len(overlay.users) > 0:
        merged.users = list(overlay.users)

    if len(overlay.groups) > 0:
        merged.groups = list(overlay.groups)

    if overlay.percentage > 0:
        merged.percentage = overlay.percentage

    return merged


class FeatureService:
    """Create, read, update and delete feature flags"""

    def __init__(self, store: FlagStore):
        self.store = store

    def add_feature(self, feature: FeatureFlag) -> FeatureFlag:
        """Store a new feature flag

        Raises FlagValidationError for an invalid feature and
        FlagAlreadyExistsError when the key is already taken.
        """
        validate(feature)

        with self.store.update() as tx:
            if tx.exists(feature.key):
                raise FlagAlreadyExistsError(feature.key)
            tx.put(feature)

        logger.with_context(feature_key=feature.key).info(f"Feature created: {feature.key}", extra={"operation": "create"})
        return feature.model_copy(deep=True)

    def get_features(self) -> List[FeatureFlag]:
        with self.store.view() as tx:
            return tx.list_all()

    def get_feature(self, key: str) -> FeatureFlag:
        with self.store.view() as tx:
            return tx.get(key)

    def update_feature(self, key: str, overlay: FeatureFlag) -> FeatureFlag:
        """Merge an overlay onto a stored feature and return the result

        The merged feature is validated before it is written; an invalid
        merge leaves the stored feature untouched.
        """
        with self.store.update() as tx:
            merged = merge_feature(tx.get(key), overlay)
            validate(merged)
            tx.put(merged)

        logger.with_context(feature_key=key).info(f"Feature updated: {key}", extra={"operation": "update"})
        return merged

    def patch_feature(self, key: str, changes: FeatureFlagUpdate) -> FeatureFlag:
        """Apply a partial update to a stored feature

        Fields absent from ``changes`` keep their stored values, then the
        result is merged like ``update_feature``. Reading the stored feature
        and writing the merge happen in the same write transaction.
        """
        with self.store.update() as tx:
            stored = tx.get(key)
            merged = merge_feature(stored, changes.apply_to(stored))
            validate(merged)
            tx.put(merged)

        logger.with_context(feature_key=key).info(f"Feature patched: {key}", extra={"operation": "update"})
        return merged

    def remove_feature(self, key: str) -> None:
        with self.store.update() as tx:
            tx.delete(key)

        logger.with_context(feature_key=key).info(f"Feature removed: {key}", extra={"operation": "remove"})

    def feature_exists(self, key: str) -> bool:
        with self.store.view() as tx:
            return tx.exists(key)

    def check_access(self, key: str, request: AccessRequest) -> bool:
        """Tell if the requester has access to a feature"""
        return access.has_access(self.get_feature(key), request)

    def accessible_features(self, request: AccessRequest) -> List[FeatureFlag]:
        """Features the requester has access to"""
        return access.accessible_features(self.get_features(), request)

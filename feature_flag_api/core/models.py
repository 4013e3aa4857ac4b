"""
Core data models for the Feature Flag API
"""

import time
from typing import Annotated, List, Optional

from pydantic import BaseModel, Field, field_validator

from feature_flag_api.core import access

UINT32_MAX = 2 ** 32 - 1

UInt32 = Annotated[int, Field(ge=0, le=UINT32_MAX)]


class FeatureFlag(BaseModel):
    """A feature flag

    When ``enabled`` is false the feature can still be partially enabled
    through ``users``, ``groups`` and ``percentage``.
    """

    key: str
    enabled: bool = False
    users: List[UInt32] = Field(default_factory=list)
    groups: List[str] = Field(default_factory=list)
    percentage: UInt32 = 0

    @field_validator("users", "groups", mode="before")
    @classmethod
    def null_list_is_empty(cls, v):
        return [] if v is None else v

    @field_validator("percentage", mode="before")
    @classmethod
    def null_percentage_is_zero(cls, v):
        return 0 if v is None else v

    def is_enabled(self) -> bool:
        return access.is_enabled(self)

    def is_partially_enabled(self) -> bool:
        return access.is_partially_enabled(self)

    def group_has_access(self, group: str) -> bool:
        return access.group_has_access(self, group)

    def user_has_access(self, user: int) -> bool:
        return access.user_has_access(self, user)

    def user_allowed_by_percentage(self, user: int) -> bool:
        return access.user_allowed_by_percentage(self, user)

    def to_json(self) -> str:
        """Stored document: key, enabled, users, groups, percentage"""
        return self.model_dump_json()

    @classmethod
    def from_json(cls, document) -> "FeatureFlag":
        return cls.model_validate_json(document)


class FeatureFlagUpdate(BaseModel):
    """Partial body of a feature update

    Only the fields present in the payload overwrite the stored feature
    before it is merged. The key of a feature can not be changed.
    """

    enabled: Optional[bool] = None
    users: Optional[List[UInt32]] = None
    groups: Optional[List[str]] = None
    percentage: Optional[UInt32] = None

    def apply_to(self, feature: FeatureFlag) -> FeatureFlag:
        changes = {
            name: value
            for name, value in self.model_dump(exclude_unset=True).items()
            if value is not None
        }
        return feature.model_copy(update=changes)


class AccessRequest(BaseModel):
    """Describes who asks for access to a feature"""

    groups: List[str] = Field(default_factory=list)
    user: Optional[UInt32] = None

    @field_validator("groups", mode="before")
    @classmethod
    def null_groups_is_empty(cls, v):
        return [] if v is None else v


class APIMessage(BaseModel):
    """Status message returned by the API"""

    status: str
    message: str


class HealthStatus(BaseModel):
    """Health status"""
    status: str  # healthy, degraded, unhealthy
    timestamp: int = Field(default_factory=lambda: int(time.time()))
    version: str = "1.0.0"
    uptime_seconds: int = 0

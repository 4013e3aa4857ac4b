"""
Access evaluation for feature flags

Pure functions deciding whether a user or a group can see a feature.
A feature is fully enabled when its ``enabled`` toggle is set or when its
percentage is 100. Otherwise it can be partially enabled through explicit
users, explicit groups or a percentage of users.

Users are bucketed with CRC-32 (IEEE) over the decimal string of their ID,
modulo 100. The bucket of a user never changes, so raising the percentage of
a feature only ever adds users.
"""

import zlib
from typing import TYPE_CHECKING, Iterable, List

if TYPE_CHECKING:
    from feature_flag_api.core.models import AccessRequest, FeatureFlag


def is_enabled(flag: "FeatureFlag") -> bool:
    return flag.enabled or flag.percentage == 100


def is_partially_enabled(flag: "FeatureFlag") -> bool:
    if is_enabled(flag):
        return False
    return len(flag.users) > 0 or len(flag.groups) > 0 or flag.percentage > 0


def group_has_access(flag: "FeatureFlag", group: str) -> bool:
    return is_enabled(flag) or (is_partially_enabled(flag) and group in flag.groups)


def user_has_access(flag: "FeatureFlag", user: int) -> bool:
    """Check if a user has access to a feature

    A user has access when the feature is enabled, or when it is partially
    enabled and the user was given access explicitly or falls in the
    allowed percentage.
    """
    if is_enabled(flag):
        return True
    if not is_partially_enabled(flag):
        return False
    return user in flag.users or user_allowed_by_percentage(flag, user)


def user_bucket(user: int) -> int:
    """Bucket in [0, 99] of a user ID"""
    return zlib.crc32(str(user).encode("ascii")) % 100


def user_allowed_by_percentage(flag: "FeatureFlag", user: int) -> bool:
    return user_bucket(user) < flag.percentage


def has_access(flag: "FeatureFlag", request: "AccessRequest") -> bool:
    """Evaluate an access request (groups and optional user) against a feature"""

    if is_enabled(flag):
        return True

    for group in request.groups:
        if group_has_access(flag, group):
            return True

    if request.user is not None:
        return user_has_access(flag, request.user)

    return False


def accessible_features(
    flags: Iterable["FeatureFlag"], request: "AccessRequest"
) -> List["FeatureFlag"]:
    """Keep only the features the requester can access, in input order"""
    return [flag for flag in flags if has_access(flag, request)]

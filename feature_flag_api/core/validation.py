"""
Feature flag validation

Checks run in order (percentage, key length, key format) and the first
failing check is raised.
"""

import re

from feature_flag_api.core.errors import (
    InvalidKeyFormatError,
    InvalidKeyLengthError,
    InvalidPercentageError,
)
from feature_flag_api.core.models import FeatureFlag

KEY_MIN_LENGTH = 3
KEY_MAX_LENGTH = 50
KEY_PATTERN = re.compile(r"^[a-z0-9_]*$")
MAX_PERCENTAGE = 100


def validate(flag: FeatureFlag) -> None:
    """Raise a FlagValidationError if the feature flag is not well formed"""

    if flag.percentage < 0 or flag.percentage > MAX_PERCENTAGE:
        raise InvalidPercentageError("Percentage must be between 0 and 100")

    if len(flag.key) < KEY_MIN_LENGTH or len(flag.key) > KEY_MAX_LENGTH:
        raise InvalidKeyLengthError(
            f"Feature key must be between {KEY_MIN_LENGTH} and {KEY_MAX_LENGTH} characters"
        )

    if not KEY_PATTERN.fullmatch(flag.key):
        raise InvalidKeyFormatError(
            "Feature key must only contain digits, lowercase letters and underscores"
        )

"""
Tests for feature flag validation
"""

import pytest

from feature_flag_api.core.errors import (
    FlagValidationError,
    InvalidKeyFormatError,
    InvalidKeyLengthError,
    InvalidPercentageError,
)
from feature_flag_api.core.models import FeatureFlag
from feature_flag_api.core.validation import validate


@pytest.mark.parametrize("key", ["foo", "homepage_v2", "a_1", "x" * 50, "___", "123"])
def test_valid_keys(key):
    validate(FeatureFlag(key=key))


@pytest.mark.parametrize("percentage", [0, 1, 50, 100])
def test_valid_percentages(percentage):
    validate(FeatureFlag(key="foo", percentage=percentage))


@pytest.mark.parametrize("key", ["", "ab", "x" * 51])
def test_key_length(key):
    with pytest.raises(InvalidKeyLengthError) as exc_info:
        validate(FeatureFlag(key=key))

    assert exc_info.value.kind == "invalid_key_length"
    assert str(exc_info.value) == "Feature key must be between 3 and 50 characters"


@pytest.mark.parametrize("key", ["a&b", "Foo", "foo-bar", "foo bar", "héhé", "foo\n"])
def test_key_format(key):
    with pytest.raises(InvalidKeyFormatError) as exc_info:
        validate(FeatureFlag(key=key))

    assert exc_info.value.kind == "invalid_key_format"


def test_percentage_above_100():
    with pytest.raises(InvalidPercentageError) as exc_info:
        validate(FeatureFlag(key="foo", percentage=101))

    assert exc_info.value.message == "Percentage must be between 0 and 100"


def test_percentage_is_checked_first():
    """The percentage error wins when several fields are invalid"""
    with pytest.raises(InvalidPercentageError):
        validate(FeatureFlag(key="A&", percentage=101))


def test_length_is_checked_before_format():
    with pytest.raises(InvalidKeyLengthError):
        validate(FeatureFlag(key="A&"))


def test_validation_errors_share_a_base_class():
    for error in (InvalidPercentageError, InvalidKeyLengthError, InvalidKeyFormatError):
        assert issubclass(error, FlagValidationError)

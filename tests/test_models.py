"""
Tests for the feature flag data models
"""

import json

import pytest
from pydantic import ValidationError

from feature_flag_api.core.models import AccessRequest, FeatureFlag, FeatureFlagUpdate


class TestFeatureFlag:

    def test_defaults(self):
        f = FeatureFlag(key="foo")

        assert f.enabled is False
        assert f.users == []
        assert f.groups == []
        assert f.percentage == 0

    def test_json_document_shape(self):
        f = FeatureFlag(key="foo", enabled=True, users=[22, 42], groups=["a"], percentage=10)

        assert json.loads(f.to_json()) == {
            "key": "foo",
            "enabled": True,
            "users": [22, 42],
            "groups": ["a"],
            "percentage": 10,
        }

    def test_from_json(self):
        f = FeatureFlag.from_json(
            '{"key":"blah","enabled":true,"users":[22,42],"groups":["foo","bar"],"percentage":null}'
        )

        assert f == FeatureFlag(key="blah", enabled=True, users=[22, 42], groups=["foo", "bar"])

    def test_null_lists(self):
        f = FeatureFlag(key="foo", users=None, groups=None)

        assert f.users == []
        assert f.groups == []

    @pytest.mark.parametrize("users", [[-1], [2 ** 32]])
    def test_users_are_uint32(self, users):
        with pytest.raises(ValidationError):
            FeatureFlag(key="foo", users=users)

    def test_negative_percentage_is_malformed(self):
        with pytest.raises(ValidationError):
            FeatureFlag(key="foo", percentage=-1)

    def test_percentage_above_100_is_left_to_validation(self):
        assert FeatureFlag(key="foo", percentage=101).percentage == 101


class TestFeatureFlagUpdate:

    def test_apply_only_given_fields(self):
        stored = FeatureFlag(key="foo", enabled=True, users=[1], groups=["a"], percentage=10)

        overlay = FeatureFlagUpdate(percentage=42).apply_to(stored)

        assert overlay == FeatureFlag(key="foo", enabled=True, users=[1], groups=["a"], percentage=42)
        assert stored.percentage == 10

    def test_null_fields_are_ignored(self):
        stored = FeatureFlag(key="foo", enabled=True)

        overlay = FeatureFlagUpdate(enabled=None, users=None).apply_to(stored)

        assert overlay.enabled is True

    def test_key_is_not_updatable(self):
        update = FeatureFlagUpdate.model_validate({"key": "bar", "enabled": True})
        overlay = update.apply_to(FeatureFlag(key="foo"))

        assert overlay.key == "foo"
        assert overlay.enabled is True


class TestAccessRequest:

    def test_defaults(self):
        request = AccessRequest()

        assert request.groups == []
        assert request.user is None

    def test_null_groups(self):
        assert AccessRequest(groups=None, user=3).groups == []

    def test_user_zero_is_a_user(self):
        assert AccessRequest(user=0).user == 0

"""Tests for joinery.joints.config: JointConfig and check_options."""

import pytest

from joinery.core.errors import ConfigError, InvalidConfigError, MissingConfigError
from joinery.joints.builder import build_joint
from joinery.joints.config import JointConfig, check_options


class TestRequiredStrings:
    @pytest.mark.parametrize("key", ["child_entity", "parent_entity", "lookup_field"])
    def test_missing(self, joint_options, key):
        del joint_options[key]
        with pytest.raises(InvalidConfigError) as exc_info:
            check_options(joint_options)
        assert exc_info.value.key == key

    @pytest.mark.parametrize("key", ["child_entity", "parent_entity", "lookup_field"])
    def test_not_a_string(self, joint_options, key):
        joint_options[key] = 42
        with pytest.raises(InvalidConfigError, match=f"Invalid option {key}"):
            check_options(joint_options)

    def test_empty(self, joint_options):
        joint_options["lookup_field"] = ""
        with pytest.raises(InvalidConfigError, match="must not be empty"):
            check_options(joint_options)

    def test_type_checked_before_cross_field_rules(self, joint_options):
        joint_options["child_entity"] = None
        joint_options["related_list_name"] = "contacts"
        with pytest.raises(InvalidConfigError) as exc_info:
            check_options(joint_options)
        assert exc_info.value.key == "child_entity"


class TestOtherOptions:
    def test_valid(self, joint_options):
        check_options(joint_options)

    def test_parent_field_name_required(self, joint_options):
        del joint_options["parent_field_name"]
        with pytest.raises(MissingConfigError):
            check_options(joint_options)

    @pytest.mark.parametrize("key", ["parent_collection", "child_collection"])
    def test_collection_required(self, joint_options, key):
        joint_options[key] = None
        with pytest.raises(MissingConfigError) as exc_info:
            check_options(joint_options)
        assert exc_info.value.key == key

    def test_collection_must_match_protocol(self, joint_options):
        joint_options["parent_collection"] = object()
        with pytest.raises(InvalidConfigError, match="Collection protocol"):
            check_options(joint_options)

    def test_parent_fields_must_be_names(self, joint_options):
        joint_options["parent_fields"] = "name"
        with pytest.raises(InvalidConfigError):
            check_options(joint_options)
        joint_options["parent_fields"] = ["name", 3]
        with pytest.raises(InvalidConfigError):
            check_options(joint_options)

    def test_unknown_option(self, joint_options):
        joint_options["relatedListName"] = "contacts"
        with pytest.raises(InvalidConfigError, match="Unknown option"):
            check_options(joint_options)


class TestRelatedListOptions:
    def test_fields_required_with_name(self, joint_options):
        joint_options["related_list_name"] = "contacts"
        with pytest.raises(MissingConfigError, match="related_list_fields is required"):
            check_options(joint_options)

    def test_fields_not_empty(self, joint_options):
        joint_options["related_list_name"] = "contacts"
        joint_options["related_list_fields"] = []
        with pytest.raises(InvalidConfigError, match="must not be empty"):
            check_options(joint_options)

    def test_fields_without_name_ignored(self, joint_options):
        joint_options["related_list_fields"] = ["lastName"]
        check_options(joint_options)


class TestJointConfig:
    def test_from_options_normalizes(self, joint_options):
        joint_options["parent_fields"] = ["name", "city", "name"]
        config = JointConfig.from_options(**joint_options)
        assert config.parent_fields == ("name", "city")
        assert config.related_list_name is None
        assert config.tracks_related_list is False

    def test_caller_list_not_mutated(self, related_options):
        fields = ["name"]
        list_fields = ["lastName"]
        related_options["parent_fields"] = fields
        related_options["related_list_fields"] = list_fields
        build_joint(**related_options)
        assert fields == ["name"]
        assert list_fields == ["lastName"]

    def test_frozen(self, joint_options):
        config = JointConfig.from_options(**joint_options)
        with pytest.raises(AttributeError):
            config.lookup_field = "other"

    def test_as_options_round_trip(self, related_options):
        config = JointConfig.from_options(**related_options)
        assert JointConfig.from_options(**config.as_options()) == config

    def test_errors_are_config_errors(self, joint_options):
        joint_options["lookup_field"] = None
        with pytest.raises(ConfigError):
            JointConfig.from_options(**joint_options)

    @pytest.mark.parametrize("key", ["parent_fields", "related_list_fields"])
    def test_hand_built_string_fields_rejected(self, related_options, key):
        options = JointConfig.from_options(**related_options).as_options()
        options[key] = "name"
        with pytest.raises(InvalidConfigError) as exc_info:
            JointConfig(**options)
        assert exc_info.value.key == key

    def test_hand_built_string_fields_never_reach_joint(self, joint_options):
        options = JointConfig.from_options(**joint_options).as_options()
        with pytest.raises(ConfigError):
            build_joint(JointConfig(**{**options, "parent_fields": "name"}))

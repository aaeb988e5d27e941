"""Unit tests for the schema validator.

Structural errors are fatal and reported as path/message pairs; dangling
references are non-fatal warnings. The validator never raises.
"""

import json

import pytest

from uiruntime.config import Settings
from uiruntime.services.schema_validator import (
    find_dangling_references,
    serialize_definition,
    validate_definition,
    validate_definition_data,
)


class TestStructuralValidation:
    """Test fatal validation errors"""

    def test_valid_definition(self, definition_json, settings):
        result = validate_definition(definition_json, settings)
        assert result.success
        assert result.errors == []
        assert result.warnings == []
        assert result.definition.initial_screen == "home"

    def test_accepts_bytes(self, definition_json, settings):
        result = validate_definition(definition_json.encode("utf-8"), settings)
        assert result.success

    def test_malformed_json(self, settings):
        """Should report a single root error with the position"""
        result = validate_definition('{"version": "1",\n  "app": }', settings)
        assert not result.success
        assert result.definition is None
        assert len(result.errors) == 1
        assert result.errors[0].path == ""
        assert "line 2" in result.errors[0].message

    def test_oversized_text(self, definition_json):
        settings = Settings(max_definition_bytes=10)
        result = validate_definition(definition_json, settings)
        assert not result.success
        assert "limit is 10" in result.errors[0].message

    def test_unknown_component_type(self, definition_data, settings):
        definition_data["screens"]["home"]["components"][0]["type"] = "carousel"
        result = validate_definition(json.dumps(definition_data), settings)
        assert not result.success
        assert any(
            error.path.startswith("screens.home.components.0") for error in result.errors
        )

    def test_unknown_database_field_type(self, definition_data, settings):
        definition_data["app"]["databaseSchema"]["tasks"]["fields"]["done"]["type"] = "flag"
        result = validate_definition(json.dumps(definition_data), settings)
        assert not result.success
        assert any("databaseSchema.tasks.fields.done" in error.path for error in result.errors)

    def test_unknown_action_type(self, definition_data, settings):
        definition_data["screens"]["home"]["components"][1]["action"] = {"type": "teleport"}
        result = validate_definition(json.dumps(definition_data), settings)
        assert not result.success
        assert any("components.1.action" in error.path for error in result.errors)

    def test_missing_top_level_keys(self, settings):
        result = validate_definition(json.dumps({"version": "1"}), settings)
        assert not result.success
        paths = {error.path for error in result.errors}
        assert {"app", "screens", "initialScreen"} <= paths

    def test_non_object_document(self, settings):
        result = validate_definition("[1, 2, 3]", settings)
        assert not result.success
        assert result.errors

    def test_never_raises_on_garbage(self, settings):
        for text in ("", "null", "42", "{", b"\xff\xfe", '{"version": "\ud800"}'):
            result = validate_definition(text, settings)
            assert not result.success

    def test_deeply_nested_json(self, settings):
        result = validate_definition("[" * 100000 + "]" * 100000, settings)
        assert not result.success
        assert result.errors[0].message == "Definition is nested too deeply"

    def test_lone_surrogate(self, settings):
        result = validate_definition('{"version": "\ud800"}', settings)
        assert not result.success
        assert result.errors[0].path == ""


class TestReferenceWarnings:
    """Test non-fatal dangling reference warnings"""

    def test_missing_navigate_target(self, definition_data, settings):
        definition_data["screens"]["home"]["components"][1]["action"]["target"] = "settings"
        result = validate_definition(json.dumps(definition_data), settings)
        assert result.success
        assert [str(w) for w in result.warnings] == [
            "screens.home.components.1.action.target: Screen 'settings' does not exist"
        ]

    def test_missing_table(self, definition_data, settings):
        definition_data["screens"]["dashboard"]["components"][3]["dataSource"]["table"] = "notes"
        result = validate_definition(json.dumps(definition_data), settings)
        assert result.success
        report = find_dangling_references(result.definition)
        assert report.missing_tables == ["notes"]
        assert report.issues[0].path == "screens.dashboard.components.3.dataSource.table"

    def test_nested_follow_up_references(self, definition_data):
        definition_data["screens"]["dashboard"]["components"][2]["action"]["onSuccess"] = {
            "type": "popup",
            "message": "Saved",
            "buttons": [{"text": "Go", "action": {"type": "navigate", "target": "nowhere"}}],
        }
        result = validate_definition_data(definition_data)
        report = find_dangling_references(result.definition)
        assert report.missing_screens == ["nowhere"]

    def test_auth_config_references(self, definition_data, settings):
        definition_data["app"]["authentication"]["postLoginScreen"] = "profile"
        definition_data["app"]["authentication"]["userTable"] = "accounts"
        result = validate_definition(json.dumps(definition_data), settings)
        assert result.success
        paths = [warning.path for warning in result.warnings]
        assert "app.authentication.postLoginScreen" in paths
        assert "app.authentication.userTable" in paths

    def test_missing_initial_screen_is_warning(self, definition_data, settings):
        definition_data["initialScreen"] = "splash"
        result = validate_definition(json.dumps(definition_data), settings)
        assert result.success
        assert result.warnings[0].path == "initialScreen"

    def test_reserved_auth_targets_are_not_dangling(self, definition_data, settings):
        definition_data["screens"]["home"]["components"][1]["action"]["target"] = "auth:signup"
        result = validate_definition(json.dumps(definition_data), settings)
        assert result.warnings == []

    def test_missing_design_token(self, definition_data, settings):
        definition_data["screens"]["home"]["components"][0]["color"] = "$accent"
        result = validate_definition(json.dumps(definition_data), settings)
        assert result.success
        report = find_dangling_references(result.definition)
        assert report.missing_tokens == ["accent"]

    def test_price_text_is_not_a_token(self, definition_data, settings):
        definition_data["screens"]["home"]["components"][0]["content"] = "$5.00 per month"
        result = validate_definition(json.dumps(definition_data), settings)
        assert result.warnings == []

    def test_warnings_are_logged(self, definition_data, caplog):
        definition_data["initialScreen"] = "splash"
        with caplog.at_level("WARNING"):
            validate_definition_data(definition_data)
        assert "dangling references" in caplog.text


class TestSerialization:
    """Test lossless re-serialization"""

    def test_round_trip_preserves_unknown_keys(self, definition_data, settings):
        definition_data["screens"]["home"]["components"][0]["animation"] = {"kind": "fade"}
        definition_data["screens"]["home"]["backgroundImage"] = "bg.png"
        definition_data["app"]["analytics"] = {"enabled": False}
        definition_data["screens"]["home"]["components"][1]["action"]["futureOption"] = 3

        result = validate_definition(json.dumps(definition_data), settings)
        assert json.loads(serialize_definition(result.definition)) == definition_data

    def test_round_trip_adds_no_defaults(self, definition_data, settings):
        result = validate_definition(json.dumps(definition_data), settings)
        text = serialize_definition(result.definition)
        assert "requiresAuth" not in json.loads(text)["screens"]["home"]

    @pytest.mark.parametrize("indent", [None, 4])
    def test_indent(self, definition, indent):
        text = serialize_definition(definition, indent=indent)
        assert json.loads(text)["initialScreen"] == "home"

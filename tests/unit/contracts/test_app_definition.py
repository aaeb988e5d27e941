"""Unit tests for the Application Definition contracts.

Covers camelCase alias handling, closed enums, the recursive component
tree and pass-through of unrecognised keys.
"""

import pytest
from pydantic import ValidationError

from uiruntime.models.contracts.actions import NavigateAction, SubmitAction
from uiruntime.models.contracts.app_definition import (
    ApplicationDefinition,
    Component,
    DatabaseField,
    Screen,
)


class TestApplicationDefinition:
    """Test top-level document parsing"""

    def test_parses_sample(self, definition):
        """Should expose snake_case attributes for camelCase keys"""
        assert definition.initial_screen == "home"
        assert definition.app.name == "Tasks"
        assert definition.design_tokens == {"primaryColor": "#3366FF", "spacing": 8}
        assert definition.auth_config.post_login_screen == "dashboard"
        assert definition.auth_config.user_table == "users"

    def test_table_names(self, definition):
        assert definition.table_names() == ["users", "tasks"]

    def test_get_screen(self, definition):
        assert definition.get_screen("home").title == "Home"
        assert definition.get_screen("missing") is None
        assert definition.get_screen(None) is None

    def test_has_screen_reference_includes_reserved_ids(self, definition):
        """Reserved auth ids count as existing screens"""
        assert definition.has_screen_reference("home")
        assert definition.has_screen_reference("auth:login")
        assert definition.has_screen_reference("auth:signup")
        assert not definition.has_screen_reference("auth:reset")
        assert not definition.has_screen_reference("settings")

    def test_missing_initial_screen_is_invalid(self, definition_data):
        del definition_data["initialScreen"]
        with pytest.raises(ValidationError):
            ApplicationDefinition.model_validate(definition_data)

    def test_immutable(self, definition):
        with pytest.raises(ValidationError):
            definition.initial_screen = "dashboard"

    def test_defaults_without_optional_blocks(self):
        definition = ApplicationDefinition.model_validate(
            {
                "version": "1",
                "app": {"name": "Bare"},
                "screens": {"main": {}},
                "initialScreen": "main",
            }
        )
        assert definition.design_tokens == {}
        assert definition.auth_config is None
        assert definition.table_names() == []
        assert definition.get_screen("main").requires_auth is False


class TestComponent:
    """Test component parsing"""

    def test_unknown_component_type_rejected(self):
        with pytest.raises(ValidationError):
            Component.model_validate({"type": "carousel"})

    def test_all_component_types_accepted(self):
        for component_type in (
            "text", "input", "button", "image", "list", "card",
            "select", "checkbox", "container", "divider", "datepicker", "timepicker",
        ):
            assert Component.model_validate({"type": component_type}).type == component_type

    def test_extra_keys_preserved(self):
        """Unrecognised keys should survive as extra data"""
        component = Component.model_validate(
            {"type": "button", "label": "Go", "futureFlag": {"a": 1}}
        )
        assert component.model_extra == {"label": "Go", "futureFlag": {"a": 1}}

    def test_action_is_typed(self):
        component = Component.model_validate(
            {"type": "button", "action": {"type": "navigate", "target": "home"}}
        )
        assert isinstance(component.action, NavigateAction)

    def test_nested_children(self):
        component = Component.model_validate(
            {
                "type": "container",
                "children": [{"type": "text", "content": "a"}],
                "components": [
                    {
                        "type": "card",
                        "children": [
                            {
                                "type": "button",
                                "action": {"type": "submit", "target": "database", "table": "t"},
                            }
                        ],
                    }
                ],
            }
        )
        children = component.child_components()
        assert [child.type for child in children] == ["text", "card"]
        assert isinstance(children[1].children[0].action, SubmitAction)

    def test_invalid_show_if_rejected(self):
        with pytest.raises(ValidationError):
            Component.model_validate({"type": "text", "showIf": "session.isAdmin"})


class TestScreenAndSchema:
    """Test screens and database schema"""

    def test_requires_auth_alias(self):
        screen = Screen.model_validate({"requiresAuth": True, "components": []})
        assert screen.requires_auth is True
        assert screen.child_components() == []

    def test_database_field_types_closed(self):
        for field_type in ("string", "number", "boolean", "date", "time"):
            assert DatabaseField.model_validate({"type": field_type}).type == field_type
        with pytest.raises(ValidationError):
            DatabaseField.model_validate({"type": "json"})

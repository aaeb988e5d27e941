"""
Pytest fixtures for the UI-JSON runtime tests.

This module provides:
1. Settings fixtures (testing environment, plaintext credentials)
2. A sample Application Definition (dict, JSON text, validated model)
3. Seed records and a ready RuntimeContext / ActionDispatcher
"""

import copy
import json
import os
import sys
from typing import Any

import pytest

# Add parent directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from uiruntime.config import Settings  # noqa: E402
from uiruntime.models.contracts.app_definition import ApplicationDefinition  # noqa: E402
from uiruntime.services.action_dispatcher import ActionDispatcher  # noqa: E402
from uiruntime.services.runtime_context import RuntimeContext  # noqa: E402


# ==================== TEST DATA ====================

SAMPLE_DEFINITION: dict[str, Any] = {
    "version": "1.0",
    "app": {
        "name": "Tasks",
        "theme": {"primaryColor": "$primaryColor", "fontFamily": "Inter"},
        "designTokens": {"primaryColor": "#3366FF", "spacing": 8},
        "databaseSchema": {
            "users": {
                "fields": {
                    "email": {"type": "string", "required": True},
                    "password": {"type": "string", "required": True},
                    "name": {"type": "string"},
                }
            },
            "tasks": {
                "fields": {
                    "title": {"type": "string"},
                    "done": {"type": "boolean"},
                }
            },
        },
        "authentication": {
            "enabled": True,
            "userTable": "users",
            "emailField": "email",
            "passwordField": "password",
            "postLoginScreen": "dashboard",
            "authRedirectScreen": "auth:login",
        },
    },
    "screens": {
        "home": {
            "id": "home",
            "title": "Home",
            "components": [
                {"type": "text", "id": "welcome", "content": "Welcome"},
                {
                    "type": "button",
                    "id": "openDashboard",
                    "content": "Open",
                    "action": {"type": "navigate", "target": "dashboard"},
                },
            ],
        },
        "dashboard": {
            "id": "dashboard",
            "title": "Dashboard",
            "requiresAuth": True,
            "components": [
                {
                    "type": "text",
                    "id": "greeting",
                    "content": "Hello {{session.user.email}}",
                    "showIf": "session.isLoggedIn",
                },
                {"type": "input", "id": "titleInput", "placeholder": "New task"},
                {
                    "type": "button",
                    "id": "addTask",
                    "content": "Add",
                    "action": {
                        "type": "submit",
                        "target": "database",
                        "table": "tasks",
                        "fields": {"title": "titleInput"},
                    },
                },
                {
                    "type": "list",
                    "id": "taskList",
                    "dataSource": {"table": "tasks"},
                    "items": [{"title": "{{title}}"}],
                },
            ],
        },
    },
    "initialScreen": "home",
}

SEED_DATA: dict[str, list[dict[str, Any]]] = {
    "users": [{"id": "1", "email": "a@b.com", "password": "x", "name": "Ada"}],
    "tasks": [{"id": "t1", "title": "Existing", "done": False}],
}


# ==================== FIXTURES ====================


@pytest.fixture
def settings() -> Settings:
    """Testing settings with plaintext credentials (seed data holds plaintext)."""
    return Settings(environment="testing", credential_scheme="plaintext")


@pytest.fixture
def definition_data() -> dict[str, Any]:
    """Fresh copy of the sample definition as plain JSON data."""
    return copy.deepcopy(SAMPLE_DEFINITION)


@pytest.fixture
def definition_json(definition_data) -> str:
    return json.dumps(definition_data)


@pytest.fixture
def definition(definition_data) -> ApplicationDefinition:
    return ApplicationDefinition.model_validate(definition_data)


@pytest.fixture
def seed_data() -> dict[str, list[dict[str, Any]]]:
    return copy.deepcopy(SEED_DATA)


@pytest.fixture
def context(definition, seed_data) -> RuntimeContext:
    """Context seeded with one user and one task, on the home screen."""
    return RuntimeContext.create(
        seed_data,
        tables=definition.table_names(),
        active_screen_id=definition.initial_screen,
    )


@pytest.fixture
def dispatcher(definition, settings) -> ActionDispatcher:
    return ActionDispatcher(definition, settings=settings)

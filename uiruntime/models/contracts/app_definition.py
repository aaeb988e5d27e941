"""
Application Definition Contracts

Core types for the UI-JSON document: app metadata, database schema,
authentication config, screens and the recursive component tree.

The JSON document uses camelCase keys; the models expose snake_case
attributes with camelCase aliases. Component, screen and app objects keep
unrecognised keys (extra="allow") so newer documents pass through an older
runtime unchanged.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from uiruntime.models.contracts.actions import Action


# -----------------------------------------------------------------------------
# Literal Types
# -----------------------------------------------------------------------------

ComponentType = Literal[
    "text",
    "input",
    "button",
    "image",
    "list",
    "card",
    "select",
    "checkbox",
    "container",
    "divider",
    "datepicker",
    "timepicker",
]

DatabaseFieldType = Literal["string", "number", "boolean", "date", "time"]

ShowIfCondition = Literal["session.isLoggedIn", "session.isLoggedOut"]

DesignTokenValue = str | int | float | bool

# Screen ids handled by the runtime's built-in auth screens
AUTH_SCREEN_PREFIX = "auth:"
AUTH_LOGIN_SCREEN = "auth:login"
AUTH_SIGNUP_SCREEN = "auth:signup"
RESERVED_SCREEN_IDS: frozenset[str] = frozenset({AUTH_LOGIN_SCREEN, AUTH_SIGNUP_SCREEN})


class DefinitionModel(BaseModel):
    """Base configuration for permissive, immutable document nodes."""

    model_config = ConfigDict(extra="allow", populate_by_name=True, frozen=True)


# -----------------------------------------------------------------------------
# Database Schema
# -----------------------------------------------------------------------------


class DatabaseField(DefinitionModel):
    """Column definition inside a table."""

    type: DatabaseFieldType = Field(description="Field type")
    description: str | None = Field(default=None, description="Field description")
    default: Any = Field(default=None, description="Default value")
    required: bool | None = Field(default=None, description="Whether the field is required")


class DatabaseTable(DefinitionModel):
    """Table definition in the app's database schema."""

    fields: dict[str, DatabaseField] = Field(description="Field name -> definition")
    description: str | None = Field(default=None, description="Table description")


# -----------------------------------------------------------------------------
# Authentication & Theme
# -----------------------------------------------------------------------------


class AuthenticationConfig(DefinitionModel):
    """How the app authenticates its own users."""

    enabled: bool = Field(description="Whether authentication is enabled")
    user_table: str = Field(alias="userTable", description="Table holding user records")
    email_field: str = Field(alias="emailField", description="Email column of the user table")
    password_field: str = Field(
        alias="passwordField", description="Password column of the user table"
    )
    post_login_screen: str = Field(
        alias="postLoginScreen", description="Screen shown after login or signup"
    )
    auth_redirect_screen: str = Field(
        alias="authRedirectScreen",
        description="Screen shown when a protected screen is opened without a session",
    )


class Theme(DefinitionModel):
    """App-wide colors and font."""

    primary_color: str | None = Field(default=None, alias="primaryColor")
    secondary_color: str | None = Field(default=None, alias="secondaryColor")
    background_color: str | None = Field(default=None, alias="backgroundColor")
    text_color: str | None = Field(default=None, alias="textColor")
    font_family: str | None = Field(default=None, alias="fontFamily")


# -----------------------------------------------------------------------------
# Components & Screens
# -----------------------------------------------------------------------------


class DataSource(DefinitionModel):
    """Binds a list component to a table."""

    table: str = Field(description="Table name")
    filters: dict[str, Any] | None = Field(default=None, description="Where clause")
    order_by: str | None = Field(
        default=None, alias="orderBy", description='Field to sort by, "-field" for descending'
    )


class Component(DefinitionModel):
    """
    A node of the component tree.

    Only the keys the runtime acts on are typed; everything else
    (labels, colors, sizes, items...) is kept as extra data for the renderer.
    """

    type: ComponentType = Field(description="Component type")
    id: str | None = Field(default=None, description="Component id (form field id for inputs)")
    content: str | None = Field(default=None, description="Text content (supports templates)")
    placeholder: str | None = Field(default=None, description="Input placeholder")
    action: Action | None = Field(default=None, description="Action triggered by the component")
    data_source: DataSource | None = Field(
        default=None, alias="dataSource", description="Table binding for lists"
    )
    template: Any = Field(default=None, description="Item template")
    show_if: ShowIfCondition | None = Field(
        default=None, alias="showIf", description="Session-based visibility"
    )
    style: dict[str, Any] | None = Field(default=None, description="Inline style values")
    children: list[Component] | None = Field(default=None, description="Child components")
    components: list[Component] | None = Field(
        default=None, description="Child components (card/container form)"
    )

    def child_components(self) -> list[Component]:
        """Children from both ``children`` and ``components``."""
        return [*(self.children or []), *(self.components or [])]


class Screen(DefinitionModel):
    """A named view with a component tree."""

    id: str | None = Field(default=None, description="Screen id (defaults to its key)")
    title: str | None = Field(default=None, description="Screen title")
    requires_auth: bool = Field(
        default=False, alias="requiresAuth", description="Require a session to view"
    )
    components: list[Component] | None = Field(default=None, description="Root components")
    layout: Any = Field(default=None, description="Layout hint")

    def child_components(self) -> list[Component]:
        return list(self.components or [])


# -----------------------------------------------------------------------------
# Application Definition
# -----------------------------------------------------------------------------


class AppMetadata(DefinitionModel):
    """The ``app`` block: name, theme, tokens, schema and auth."""

    name: str = Field(description="App name")
    theme: Theme | None = Field(default=None, description="App theme")
    design_tokens: dict[str, DesignTokenValue] | None = Field(
        default=None, alias="designTokens", description="Token name -> value"
    )
    database_schema: dict[str, DatabaseTable] | None = Field(
        default=None, alias="databaseSchema", description="Table name -> definition"
    )
    authentication: AuthenticationConfig | None = Field(
        default=None, description="Authentication config"
    )


class ApplicationDefinition(DefinitionModel):
    """
    A validated UI-JSON document.

    Immutable; a new instance is built each time the source text changes.
    """

    version: str = Field(description="Document version")
    app: AppMetadata = Field(description="App metadata")
    screens: dict[str, Screen] = Field(description="Screen id -> screen")
    initial_screen: str = Field(alias="initialScreen", description="First screen shown")

    @property
    def design_tokens(self) -> dict[str, DesignTokenValue]:
        return dict(self.app.design_tokens or {})

    @property
    def auth_config(self) -> AuthenticationConfig | None:
        return self.app.authentication

    def get_screen(self, screen_id: str | None) -> Screen | None:
        if screen_id is None:
            return None
        return self.screens.get(screen_id)

    def table_names(self) -> list[str]:
        return list((self.app.database_schema or {}).keys())

    def has_screen_reference(self, screen_id: str) -> bool:
        """True if ``screen_id`` names a screen or a reserved auth screen."""
        return screen_id in self.screens or screen_id in RESERVED_SCREEN_IDS


Component.model_rebuild()
Screen.model_rebuild()
ApplicationDefinition.model_rebuild()

"""
Pydantic contracts for the UI-JSON runtime.

    from uiruntime.models.contracts import ApplicationDefinition, SubmitAction
    from uiruntime.models.contracts.actions import Action  # Granular access
"""

from uiruntime.models.contracts.actions import (
    ACTION_TYPES,
    Action,
    DeleteRecordAction,
    GoBackAction,
    LoginAction,
    LogoutAction,
    NavigateAction,
    OpenUrlAction,
    PopupAction,
    PopupButton,
    SetValueAction,
    SignupAction,
    SubmitAction,
    action_adapter,
)
from uiruntime.models.contracts.app_definition import (
    AUTH_LOGIN_SCREEN,
    AUTH_SCREEN_PREFIX,
    AUTH_SIGNUP_SCREEN,
    RESERVED_SCREEN_IDS,
    AppMetadata,
    ApplicationDefinition,
    AuthenticationConfig,
    Component,
    DatabaseField,
    DatabaseTable,
    DataSource,
    Screen,
    Theme,
)
from uiruntime.models.contracts.runtime import (
    Effect,
    OpenUrlEffect,
    PopupButtonEffect,
    PopupEffect,
    ReferenceReport,
    ResolvedScreen,
    Session,
    ValidationIssue,
    ValidationResult,
)

__all__ = [
    # Actions
    "ACTION_TYPES",
    "Action",
    "DeleteRecordAction",
    "GoBackAction",
    "LoginAction",
    "LogoutAction",
    "NavigateAction",
    "OpenUrlAction",
    "PopupAction",
    "PopupButton",
    "SetValueAction",
    "SignupAction",
    "SubmitAction",
    "action_adapter",
    # Application Definition
    "AUTH_LOGIN_SCREEN",
    "AUTH_SCREEN_PREFIX",
    "AUTH_SIGNUP_SCREEN",
    "RESERVED_SCREEN_IDS",
    "AppMetadata",
    "ApplicationDefinition",
    "AuthenticationConfig",
    "Component",
    "DatabaseField",
    "DatabaseTable",
    "DataSource",
    "Screen",
    "Theme",
    # Runtime
    "Effect",
    "OpenUrlEffect",
    "PopupButtonEffect",
    "PopupEffect",
    "ReferenceReport",
    "ResolvedScreen",
    "Session",
    "ValidationIssue",
    "ValidationResult",
]

"""
UI Action Definitions

The closed set of declarative actions a UI-JSON app can trigger.

Each variant is a Pydantic model tagged by its ``type`` literal; ``Action``
is the discriminated union over all of them. Actions nest: submit and auth
actions carry follow-up actions in ``onSuccess``/``onError``, and popup
buttons carry an optional action of their own.

Unknown keys are kept (extra="allow") so a definition survives a
validate -> serialize round trip unchanged.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


# -----------------------------------------------------------------------------
# Literal Types
# -----------------------------------------------------------------------------

ActionType = Literal[
    "navigate",
    "popup",
    "goBack",
    "submit",
    "deleteRecord",
    "auth:login",
    "auth:signup",
    "auth:logout",
    "setValue",
    "openUrl",
]

PopupVariant = Literal["alert", "confirm", "info"]

ButtonVariant = Literal["primary", "secondary", "outline", "text"]

HttpMethod = Literal["GET", "POST", "PUT", "PATCH", "DELETE"]

NavigateTransition = Literal["slide", "fade", "modal"]


# -----------------------------------------------------------------------------
# Action Base
# -----------------------------------------------------------------------------


class ActionBase(BaseModel):
    """Base configuration shared by all action variants."""

    model_config = ConfigDict(extra="allow", populate_by_name=True, frozen=True)


# -----------------------------------------------------------------------------
# Navigation
# -----------------------------------------------------------------------------


class NavigateAction(ActionBase):
    """Switch the active screen. Validity is checked by the screen resolver."""

    type: Literal["navigate"] = "navigate"
    target: str = Field(description="Screen id or reserved auth screen id")
    params: dict[str, Any] | None = Field(default=None, description="Screen parameters")
    transition: NavigateTransition | None = Field(default=None, description="Transition hint")


class GoBackAction(ActionBase):
    """Return to the app's initial screen (there is no history stack)."""

    type: Literal["goBack"] = "goBack"


# -----------------------------------------------------------------------------
# Popups
# -----------------------------------------------------------------------------


class PopupButton(BaseModel):
    """Button rendered inside a popup."""

    model_config = ConfigDict(extra="allow", populate_by_name=True, frozen=True)

    text: str = Field(description="Button label")
    variant: ButtonVariant | None = Field(default=None, description="Button variant")
    action: Action | None = Field(
        default=None, description="Action dispatched after the popup is dismissed"
    )


class PopupAction(ActionBase):
    """Show a transient modal."""

    type: Literal["popup"] = "popup"
    title: str | None = Field(default=None, description="Popup title")
    message: str = Field(description="Popup body text")
    variant: PopupVariant | None = Field(default=None, description="Popup variant")
    buttons: list[PopupButton] | None = Field(default=None, description="Popup buttons")


# -----------------------------------------------------------------------------
# Data
# -----------------------------------------------------------------------------


class SubmitAction(ActionBase):
    """
    Submit form values to the record store or to a remote endpoint.

    ``fields`` maps destination field name -> FormState field id.
    """

    type: Literal["submit"] = "submit"
    target: str | None = Field(
        default=None, description='"database", "api", or an endpoint URL'
    )
    endpoint: str | None = Field(default=None, description="Endpoint URL for remote submits")
    method: HttpMethod | None = Field(default=None, description="HTTP method for remote submits")
    headers: dict[str, str] | None = Field(default=None, description="Extra request headers")
    table: str | None = Field(default=None, description="Destination table for database submits")
    fields: dict[str, str] | None = Field(
        default=None, description="Destination field name -> form field id"
    )
    on_success: Action | None = Field(default=None, alias="onSuccess")
    on_error: Action | None = Field(default=None, alias="onError")

    @property
    def is_database(self) -> bool:
        return self.target == "database"

    @property
    def remote_endpoint(self) -> str | None:
        """Endpoint for a remote submit: ``endpoint`` or a URL given as ``target``."""
        if self.endpoint:
            return self.endpoint
        if self.target and self.target not in ("database", "api"):
            return self.target
        return None


class DeleteRecordAction(ActionBase):
    """Remove a record from a table. Absent ids are a no-op."""

    type: Literal["deleteRecord"] = "deleteRecord"
    table: str = Field(description="Table name")
    record_id: str | int = Field(alias="recordId", description="Id of the record to delete")


class SetValueAction(ActionBase):
    """Set a single FormState entry."""

    type: Literal["setValue"] = "setValue"
    target_id: str = Field(alias="targetId", description="Form field id")
    value: Any = Field(default=None, description="Value to store")


class OpenUrlAction(ActionBase):
    """Ask the host to open a URL."""

    type: Literal["openUrl"] = "openUrl"
    url: str = Field(description="URL to open")
    external: bool | None = Field(default=None, description="Open outside the app")


# -----------------------------------------------------------------------------
# Authentication
# -----------------------------------------------------------------------------


class LoginFields(BaseModel):
    """Form field ids holding the submitted credentials."""

    model_config = ConfigDict(extra="allow", frozen=True)

    email: str
    password: str


class LoginAction(ActionBase):
    """Log in against the configured user table."""

    type: Literal["auth:login"] = "auth:login"
    fields: LoginFields
    on_error: Action | None = Field(default=None, alias="onError")


class SignupAction(ActionBase):
    """
    Create a user record and log it in.

    ``fields`` maps user field name -> form field id; ``email`` and
    ``password`` are required, any other key is copied verbatim.
    """

    type: Literal["auth:signup"] = "auth:signup"
    fields: LoginFields
    on_error: Action | None = Field(default=None, alias="onError")


class LogoutAction(ActionBase):
    """Clear the session."""

    type: Literal["auth:logout"] = "auth:logout"
    on_success: Action | None = Field(default=None, alias="onSuccess")


# -----------------------------------------------------------------------------
# Discriminated Union
# -----------------------------------------------------------------------------

Action = Annotated[
    Union[
        NavigateAction,
        PopupAction,
        GoBackAction,
        SubmitAction,
        DeleteRecordAction,
        LoginAction,
        SignupAction,
        LogoutAction,
        SetValueAction,
        OpenUrlAction,
    ],
    Field(discriminator="type"),
]

ACTION_TYPES: frozenset[str] = frozenset(ActionType.__args__)

PopupButton.model_rebuild()
PopupAction.model_rebuild()
SubmitAction.model_rebuild()
LoginAction.model_rebuild()
SignupAction.model_rebuild()
LogoutAction.model_rebuild()

action_adapter: TypeAdapter[Action] = TypeAdapter(Action)

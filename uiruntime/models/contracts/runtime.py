"""
Runtime Contracts

Value types produced by the runtime: validation results, screen
resolution results, the session, and the transient effects emitted by
action dispatch.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from uiruntime.models.contracts.actions import Action, ButtonVariant, PopupVariant
from uiruntime.models.contracts.app_definition import ApplicationDefinition, Screen


# -----------------------------------------------------------------------------
# Validation
# -----------------------------------------------------------------------------


class ValidationIssue(BaseModel):
    """A problem found in a definition, located by dotted path."""

    model_config = ConfigDict(frozen=True)

    path: str = Field(description='Dotted path into the document ("" for the root)')
    message: str = Field(description="Human-readable description")

    def __str__(self) -> str:
        return f"{self.path}: {self.message}" if self.path else self.message


class ReferenceReport(BaseModel):
    """Dangling references found by the reference pass."""

    missing_screens: list[str] = Field(default_factory=list)
    missing_tables: list[str] = Field(default_factory=list)
    missing_tokens: list[str] = Field(default_factory=list)
    issues: list[ValidationIssue] = Field(default_factory=list)


class ValidationResult(BaseModel):
    """Outcome of validating Application Definition text."""

    definition: ApplicationDefinition | None = None
    errors: list[ValidationIssue] = Field(default_factory=list)
    warnings: list[ValidationIssue] = Field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.definition is not None and not self.errors


# -----------------------------------------------------------------------------
# Session
# -----------------------------------------------------------------------------


class Session(BaseModel):
    """The logged-in user of the running app."""

    user: dict[str, Any] = Field(description="User record from the user table")

    def binding(self) -> dict[str, Any]:
        """Shape exposed to templates as ``session``."""
        return {"user": dict(self.user)}


# -----------------------------------------------------------------------------
# Screen Resolution
# -----------------------------------------------------------------------------

AuthVariant = Literal["login", "signup"]

UnresolvedReason = Literal["no_screen", "unknown_screen", "auth_unavailable"]


class ResolvedScreen(BaseModel):
    """
    The screen that is actually visible for a requested id.

    kind:
        "screen"      - ``screen`` holds a member of ``screens``
        "auth"        - built-in auth form, ``auth_variant`` says which
        "unresolved"  - nothing to show; renderer shows a placeholder
    """

    kind: Literal["screen", "auth", "unresolved"]
    screen_id: str | None = Field(default=None, description="Id that was finally resolved")
    screen: Screen | None = None
    auth_variant: AuthVariant | None = None
    redirected_from: str | None = Field(
        default=None, description="Requested id when the auth guard redirected"
    )
    reason: UnresolvedReason | None = None

    @property
    def is_resolved(self) -> bool:
        return self.kind != "unresolved"


# -----------------------------------------------------------------------------
# Effects
# -----------------------------------------------------------------------------


class PopupButtonEffect(BaseModel):
    """A button of a displayed popup."""

    text: str
    variant: ButtonVariant | None = None
    action: Action | None = None


class PopupEffect(BaseModel):
    """A modal the host should display until dismissed."""

    kind: Literal["popup"] = "popup"
    title: str | None = None
    message: str
    variant: PopupVariant = "alert"
    buttons: list[PopupButtonEffect] = Field(default_factory=list)


class OpenUrlEffect(BaseModel):
    """A URL the host should open."""

    kind: Literal["openUrl"] = "openUrl"
    url: str
    external: bool = False


Effect = PopupEffect | OpenUrlEffect

"""
Component Binding

Render-time helpers for the renderer collaborator: session-based
visibility, property resolution (tokens + templates), list data binding,
and the actions behind the built-in auth screens.

Resolution happens here rather than during validation because session,
form state and records change throughout a run.
"""

import logging
from typing import Any

from uiruntime.models.contracts.actions import Action, action_adapter
from uiruntime.models.contracts.app_definition import (
    AUTH_LOGIN_SCREEN,
    AUTH_SIGNUP_SCREEN,
    Component,
    Screen,
)
from uiruntime.models.contracts.runtime import AuthVariant, Session
from uiruntime.services.record_store import RecordStore
from uiruntime.services.template_resolver import build_binding_context, resolve

logger = logging.getLogger(__name__)

# Form field ids used by the built-in auth screens
AUTH_EMAIL_FIELD = "auth_email"
AUTH_PASSWORD_FIELD = "auth_password"

# Keys the renderer needs verbatim
_UNRESOLVED_KEYS = frozenset({"type", "id", "showIf", "dataSource", "itemAction"})


def is_component_visible(component: Component, session: Session | None) -> bool:
    """Evaluate ``showIf`` against the session."""
    if component.show_if == "session.isLoggedIn":
        return session is not None
    if component.show_if == "session.isLoggedOut":
        return session is None
    return True


def visible_children(node: Component | Screen, session: Session | None) -> list[Component]:
    """Children of a component or screen that should be rendered."""
    return [child for child in node.child_components() if is_component_visible(child, session)]


def resolve_component_props(
    component: Component,
    tokens: dict[str, Any] | None,
    context: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """
    Resolve a component's display properties.

    Actions and child components are left out (they are dispatched or
    rendered separately); list item templates of data-bound lists are left
    for bind_data_source.

    Args:
        component: Component to render
        tokens: Design tokens
        context: Binding context from build_binding_context

    Returns:
        camelCase property dict with tokens and templates resolved
    """
    data = component.model_dump(
        mode="json",
        by_alias=True,
        exclude_unset=True,
        exclude={"children", "components", "action"},
    )
    context = context or {}
    skip = _UNRESOLVED_KEYS | ({"items", "template"} if component.data_source else set())

    return {
        key: value if key in skip else resolve(value, context, tokens)
        for key, value in data.items()
    }


def bind_data_source(
    component: Component,
    store: RecordStore,
    tokens: dict[str, Any] | None,
    session: Session | None,
) -> list[Any]:
    """
    Build the items of a list component.

    Without a dataSource the static ``items`` are resolved and returned.
    With one, each record of ``dataSource.table`` (filtered and ordered as
    declared) is rendered through the item template: ``template`` when set,
    else the first entry of ``items``. Templates see the record's fields at
    the top level and the session as ``session``.
    """
    session_binding = session.binding() if session else None
    items = (component.model_extra or {}).get("items") or []

    if component.data_source is None:
        context = build_binding_context(session_binding)
        return [resolve(item, context, tokens) for item in items]

    source = component.data_source
    where = None
    if source.filters:
        where = resolve(source.filters, build_binding_context(session_binding), tokens)

    records = store.query(source.table, where=where, order_by=source.order_by)
    template = component.template if component.template is not None else (items[0] if items else None)

    bound = []
    for record in records:
        if template is None:
            bound.append(record)
            continue
        item = resolve(template, build_binding_context(session_binding, record), tokens)
        if isinstance(item, dict):
            item.setdefault("id", record.get("id"))
        bound.append(item)

    logger.debug(f"Bound {len(bound)} item(s) from '{source.table}'")
    return bound


def auth_screen_actions(variant: AuthVariant) -> dict[str, Action]:
    """
    Actions behind the built-in auth screens.

    Returns:
        {"submit": login/signup action, "switch": navigate to the other form}
    """
    if variant == "login":
        submit = {
            "type": "auth:login",
            "fields": {"email": AUTH_EMAIL_FIELD, "password": AUTH_PASSWORD_FIELD},
            "onError": {
                "type": "popup",
                "title": "Login failed",
                "message": "Invalid email or password.",
            },
        }
        switch_to = AUTH_SIGNUP_SCREEN
    else:
        submit = {
            "type": "auth:signup",
            "fields": {"email": AUTH_EMAIL_FIELD, "password": AUTH_PASSWORD_FIELD},
            "onError": {
                "type": "popup",
                "title": "Signup failed",
                "message": "This email is already in use.",
            },
        }
        switch_to = AUTH_LOGIN_SCREEN

    return {
        "submit": action_adapter.validate_python(submit),
        "switch": action_adapter.validate_python({"type": "navigate", "target": switch_to}),
    }

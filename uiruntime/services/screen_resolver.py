"""
Screen Resolver

Decides which screen is actually visible for a requested screen id.

- ``auth:login`` / ``auth:signup`` resolve to the built-in auth forms.
- Any other id is looked up in ``screens``; a miss is "unresolved" and the
  renderer shows a placeholder instead of failing.
- A screen with ``requiresAuth`` opened without a session redirects to
  ``authentication.authRedirectScreen``. The redirect is a single hop:
  the target is shown even if it requires auth itself.
"""

import logging

from uiruntime.models.contracts.app_definition import (
    AUTH_LOGIN_SCREEN,
    AUTH_SIGNUP_SCREEN,
    ApplicationDefinition,
)
from uiruntime.models.contracts.runtime import AuthVariant, ResolvedScreen, Session

logger = logging.getLogger(__name__)

AUTH_VARIANTS: dict[str, AuthVariant] = {
    AUTH_LOGIN_SCREEN: "login",
    AUTH_SIGNUP_SCREEN: "signup",
}


def _lookup(definition: ApplicationDefinition, screen_id: str | None) -> ResolvedScreen:
    """Resolve an id without applying the auth guard."""
    if not screen_id:
        return ResolvedScreen(kind="unresolved", screen_id=screen_id, reason="no_screen")

    variant = AUTH_VARIANTS.get(screen_id)
    if variant is not None:
        return ResolvedScreen(kind="auth", screen_id=screen_id, auth_variant=variant)

    screen = definition.get_screen(screen_id)
    if screen is None:
        logger.debug(f"Screen '{screen_id}' not found")
        return ResolvedScreen(kind="unresolved", screen_id=screen_id, reason="unknown_screen")

    return ResolvedScreen(kind="screen", screen_id=screen_id, screen=screen)


def resolve_screen(
    definition: ApplicationDefinition,
    screen_id: str | None,
    session: Session | None,
) -> ResolvedScreen:
    """
    Resolve the visible screen for ``screen_id``.

    Args:
        definition: Validated application definition
        screen_id: Requested screen id (None resolves to unresolved)
        session: Current session, or None when logged out

    Returns:
        ResolvedScreen describing a concrete screen, an auth form, or an
        unresolved placeholder
    """
    resolved = _lookup(definition, screen_id)

    if resolved.kind != "screen" or not resolved.screen.requires_auth or session is not None:
        return resolved

    auth = definition.auth_config
    if auth is None:
        logger.warning(
            f"Screen '{screen_id}' requires auth but the app has no authentication config"
        )
        return ResolvedScreen(kind="unresolved", screen_id=screen_id, reason="auth_unavailable")

    logger.debug(f"Screen '{screen_id}' requires auth; redirecting to '{auth.auth_redirect_screen}'")
    redirected = _lookup(definition, auth.auth_redirect_screen)
    return redirected.model_copy(update={"redirected_from": screen_id})


def initial_screen(definition: ApplicationDefinition, session: Session | None) -> ResolvedScreen:
    """Resolve the app's initial screen."""
    return resolve_screen(definition, definition.initial_screen, session)

"""
App Runtime

Host-facing facade over one running app: owns the validated definition,
the RuntimeContext and the dispatcher, and exposes the interface the
renderer and the host use (resolve a screen, dispatch, read/patch form
state, snapshot records, show popups).
"""

import logging
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from uiruntime.config import Settings, get_settings
from uiruntime.core.exceptions import InvalidDefinitionError
from uiruntime.core.security import CredentialVerifier
from uiruntime.models.contracts.app_definition import ApplicationDefinition
from uiruntime.models.contracts.runtime import (
    Effect,
    PopupEffect,
    ResolvedScreen,
    Session,
    ValidationResult,
)
from uiruntime.services import screen_resolver
from uiruntime.services.action_dispatcher import ActionDispatcher, ActionInput, DispatchResult
from uiruntime.services.remote_submit import RemoteSubmitter
from uiruntime.services.runtime_context import RuntimeContext
from uiruntime.services.schema_validator import validate_definition

logger = logging.getLogger(__name__)

Listener = Callable[[list[Effect]], None]

# Default for resolve_screen: use the runtime's own session
_CURRENT_SESSION: Any = object()


class AppRuntime:
    """
    A running UI-JSON app.

    Usage:
        runtime = AppRuntime.from_json(text, database_data)
        screen = runtime.current_screen()
        runtime.set_form_state({"titleInput": "Buy milk"})
        runtime.dispatch({"type": "submit", "target": "database", ...})
    """

    def __init__(
        self,
        definition: ApplicationDefinition,
        database_data: Mapping[str, Iterable[Mapping[str, Any]]] | None = None,
        *,
        credentials: CredentialVerifier | None = None,
        submitter: RemoteSubmitter | None = None,
        settings: Settings | None = None,
    ):
        """
        Initialize runtime.

        Args:
            definition: Validated application definition
            database_data: Seed records, table name -> records
            credentials: Credential verifier for auth actions
            submitter: Collaborator for non-database submits
            settings: Optional settings override
        """
        self.settings = settings or get_settings()
        self._definition = definition
        self.context = RuntimeContext.create(
            database_data,
            tables=definition.table_names(),
            active_screen_id=definition.initial_screen,
        )
        self._dispatcher = ActionDispatcher(
            definition,
            credentials=credentials,
            submitter=submitter,
            settings=self.settings,
            effect_sink=self._publish,
        )
        self._popups: list[PopupEffect] = []
        self._listeners: list[Listener] = []

    @classmethod
    def from_json(
        cls,
        text: str | bytes,
        database_data: Mapping[str, Iterable[Mapping[str, Any]]] | None = None,
        **kwargs: Any,
    ) -> "AppRuntime":
        """
        Validate ``text`` and build a runtime for it.

        Raises:
            InvalidDefinitionError: If the text does not validate
        """
        result = validate_definition(text, kwargs.get("settings"))
        if not result.success:
            raise InvalidDefinitionError(result.errors)
        return cls(result.definition, database_data, **kwargs)

    @property
    def definition(self) -> ApplicationDefinition:
        return self._definition

    @property
    def session(self) -> Session | None:
        return self.context.session

    # =========================================================================
    # Screens
    # =========================================================================

    def resolve_screen(self, screen_id: str | None, session: Session | None = _CURRENT_SESSION) -> ResolvedScreen:
        """Resolve ``screen_id`` for ``session`` (the runtime's session by default)."""
        if session is _CURRENT_SESSION:
            session = self.context.session
        return screen_resolver.resolve_screen(self._definition, screen_id, session)

    def current_screen(self) -> ResolvedScreen:
        """
        Resolve the active screen.

        An auth redirect counts as a navigation: the redirect target becomes
        the active screen id.
        """
        resolved = self.resolve_screen(self.context.active_screen_id)
        if resolved.redirected_from is not None and resolved.screen_id:
            self.context.navigate(resolved.screen_id)
        return resolved

    # =========================================================================
    # Actions
    # =========================================================================

    def dispatch(self, action: ActionInput) -> None:
        """Apply an action from the renderer. Never raises."""
        result = self._dispatcher.dispatch(action, self.context)
        self._publish(result)

    def _publish(self, result: DispatchResult) -> None:
        self._popups.extend(result.popups)
        if not result.effects:
            return
        for listener in list(self._listeners):
            try:
                listener(list(result.effects))
            except Exception:
                logger.exception("Runtime listener failed")

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register ``listener`` for emitted effects.

        Returns:
            A callable that unsubscribes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    @property
    def popup(self) -> PopupEffect | None:
        """The popup currently shown, if any."""
        return self._popups[0] if self._popups else None

    def dismiss_popup(self, button_index: int = 0) -> None:
        """Dismiss the shown popup, then dispatch the pressed button's action."""
        if not self._popups:
            return
        popup = self._popups.pop(0)
        if not 0 <= button_index < len(popup.buttons):
            return
        action = popup.buttons[button_index].action
        if action is not None:
            self.dispatch(action)

    async def wait_for_pending(self) -> None:
        """Wait for in-flight remote submits and their follow-up actions."""
        await self._dispatcher.wait_for_pending()

    # =========================================================================
    # State Access
    # =========================================================================

    def get_form_state(self) -> dict[str, Any]:
        return self.context.form_state.snapshot()

    def set_form_state(self, partial: Mapping[str, Any]) -> None:
        """Merge renderer input into the form state."""
        self.context.form_state.update(partial)

    def get_record_store(self) -> dict[str, list[dict[str, Any]]]:
        """Read-only snapshot of every table."""
        return self.context.records.snapshot()

    # =========================================================================
    # Reload
    # =========================================================================

    def reload(self, text: str | bytes) -> ValidationResult:
        """
        Swap in a new definition built from ``text``.

        Session, form state and records are kept. On validation errors the
        current definition stays in place.
        """
        result = validate_definition(text, self.settings)
        if not result.success:
            logger.warning(f"Reload rejected: {len(result.errors)} validation error(s)")
            return result

        self._definition = result.definition
        self._dispatcher.definition = result.definition
        self.context.records.ensure_tables(self._definition.table_names())

        active = self.context.active_screen_id
        if not active or not self._definition.has_screen_reference(active):
            logger.debug(f"Active screen '{active}' no longer exists; returning to initial screen")
            self.context.navigate(self._definition.initial_screen)

        return result

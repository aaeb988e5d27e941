"""
Action Dispatcher

The reducer of the runtime: applies one Action to a RuntimeContext and
collects the transient effects (popups, URLs) it emits.

Each action variant has its own handler, looked up by the action's model
class. Dispatch is total: payload problems are logged and ignored,
handler failures are logged, and auth/data failures take the action's
declarative ``onError`` branch. Nothing propagates to the caller.

Follow-up actions (onSuccess/onError) run synchronously inside the same
dispatch, up to ``settings.max_action_depth`` levels deep. Non-database
submits are the one suspending operation: the request runs as a task on
the current event loop and its follow-up action is dispatched when it
completes, against whatever state exists then.
"""

import asyncio
import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from pydantic import ValidationError

from uiruntime.config import Settings, get_settings
from uiruntime.core.exceptions import (
    ActionDepthExceededError,
    CredentialRejectedError,
    SubmissionError,
)
from uiruntime.core.security import CredentialVerifier, get_credential_verifier
from uiruntime.models.contracts.actions import (
    ACTION_TYPES,
    Action,
    ActionBase,
    DeleteRecordAction,
    GoBackAction,
    LoginAction,
    LogoutAction,
    NavigateAction,
    OpenUrlAction,
    PopupAction,
    SetValueAction,
    SignupAction,
    SubmitAction,
    action_adapter,
)
from uiruntime.models.contracts.app_definition import ApplicationDefinition
from uiruntime.models.contracts.runtime import (
    Effect,
    OpenUrlEffect,
    PopupButtonEffect,
    PopupEffect,
)
from uiruntime.services.remote_submit import HttpSubmitter, RemoteSubmitter
from uiruntime.services.runtime_context import RuntimeContext
from uiruntime.services.schema_validator import format_validation_errors

logger = logging.getLogger(__name__)

ActionInput = Action | Mapping[str, Any] | None


@dataclass
class DispatchResult:
    """Context after dispatch plus what the host must act on."""

    context: RuntimeContext
    effects: list[Effect] = field(default_factory=list)
    pending: list[asyncio.Task] = field(default_factory=list)

    @property
    def popups(self) -> list[PopupEffect]:
        return [effect for effect in self.effects if isinstance(effect, PopupEffect)]


EffectSink = Callable[[DispatchResult], None]


def coerce_action(action: ActionInput) -> Action | None:
    """
    Turn renderer input into a typed action.

    Returns:
        The validated action, or None (logged) when the input has no type,
        an unknown type, or an invalid payload
    """
    if action is None:
        return None
    if isinstance(action, ActionBase):
        return action
    if not isinstance(action, Mapping):
        logger.warning(f"Invalid action: {action!r}")
        return None

    action_type = action.get("type")
    if not action_type:
        logger.warning(f"Invalid action (missing type): {dict(action)!r}")
        return None
    if action_type not in ACTION_TYPES:
        logger.warning(f"Unknown action type: {action_type}")
        return None

    try:
        return action_adapter.validate_python(action)
    except ValidationError as e:
        details = "; ".join(str(issue) for issue in format_validation_errors(e.errors()))
        logger.warning(f"Invalid '{action_type}' action: {details}")
        return None


class ActionDispatcher:
    """
    Applies actions to a RuntimeContext.

    Usage:
        dispatcher = ActionDispatcher(definition)
        result = dispatcher.dispatch({"type": "navigate", "target": "home"}, context)
        for popup in result.popups:
            show(popup)
    """

    def __init__(
        self,
        definition: ApplicationDefinition,
        *,
        credentials: CredentialVerifier | None = None,
        submitter: RemoteSubmitter | None = None,
        settings: Settings | None = None,
        effect_sink: EffectSink | None = None,
    ):
        """
        Initialize dispatcher.

        Args:
            definition: The app whose actions are dispatched
            credentials: Credential verifier for auth actions
            submitter: Collaborator for non-database submits
            settings: Optional settings override
            effect_sink: Called with the result of every asynchronous completion
        """
        self.settings = settings or get_settings()
        self.definition = definition
        self.credentials = credentials or get_credential_verifier(self.settings)
        self.submitter = submitter or HttpSubmitter(self.settings)
        self.effect_sink = effect_sink

        self._handlers: dict[type, Callable[[Any, RuntimeContext, DispatchResult, int], None]] = {
            NavigateAction: self._handle_navigate,
            GoBackAction: self._handle_go_back,
            PopupAction: self._handle_popup,
            SubmitAction: self._handle_submit,
            DeleteRecordAction: self._handle_delete_record,
            LoginAction: self._handle_login,
            SignupAction: self._handle_signup,
            LogoutAction: self._handle_logout,
            SetValueAction: self._handle_set_value,
            OpenUrlAction: self._handle_open_url,
        }
        self._pending: set[asyncio.Task] = set()
        self._submit_locks: dict[str, asyncio.Lock] = {}

    # =========================================================================
    # Dispatch
    # =========================================================================

    def dispatch(self, action: ActionInput, context: RuntimeContext) -> DispatchResult:
        """
        Apply ``action`` (and its synchronous follow-ups) to ``context``.

        Args:
            action: Typed action or raw action dict from the renderer
            context: State to mutate

        Returns:
            DispatchResult with the same context, emitted effects, and any
            remote submits still in flight
        """
        result = DispatchResult(context=context)
        self._run_chain(action, context, result, depth=0)
        return result

    def _run_chain(
        self, action: ActionInput, context: RuntimeContext, result: DispatchResult, depth: int
    ) -> None:
        try:
            self._dispatch(action, context, result, depth)
        except ActionDepthExceededError as e:
            logger.warning(f"{e.message}; remaining actions dropped")

    def _dispatch(
        self, action: ActionInput, context: RuntimeContext, result: DispatchResult, depth: int
    ) -> None:
        parsed = coerce_action(action)
        if parsed is None:
            return

        if depth >= self.settings.max_action_depth:
            raise ActionDepthExceededError(self.settings.max_action_depth)

        handler = self._handlers.get(type(parsed))
        if handler is None:
            logger.warning(f"Unknown action type: {parsed.type}")
            return

        logger.debug(f"Dispatching {parsed.type} (depth {depth})")
        try:
            handler(parsed, context, result, depth)
        except ActionDepthExceededError:
            raise
        except Exception:
            logger.exception(f"Error handling action {parsed.type}")

    def _follow_up(
        self, action: Action | None, context: RuntimeContext, result: DispatchResult, depth: int
    ) -> None:
        """Dispatch an onSuccess/onError branch one level deeper."""
        if action is not None:
            self._dispatch(action, context, result, depth + 1)

    # =========================================================================
    # Navigation
    # =========================================================================

    def _handle_navigate(
        self, action: NavigateAction, context: RuntimeContext, result: DispatchResult, depth: int
    ) -> None:
        context.navigate(action.target)

    def _handle_go_back(
        self, action: GoBackAction, context: RuntimeContext, result: DispatchResult, depth: int
    ) -> None:
        # No history stack: back always means the initial screen
        context.navigate(self.definition.initial_screen)

    # =========================================================================
    # Effects
    # =========================================================================

    def _handle_popup(
        self, action: PopupAction, context: RuntimeContext, result: DispatchResult, depth: int
    ) -> None:
        buttons = [
            PopupButtonEffect(text=button.text, variant=button.variant, action=button.action)
            for button in action.buttons or []
        ]
        if not buttons:
            buttons = [PopupButtonEffect(text=self.settings.default_popup_button_text)]

        result.effects.append(
            PopupEffect(
                title=action.title,
                message=action.message,
                variant=action.variant or "alert",
                buttons=buttons,
            )
        )

    def _handle_open_url(
        self, action: OpenUrlAction, context: RuntimeContext, result: DispatchResult, depth: int
    ) -> None:
        result.effects.append(OpenUrlEffect(url=action.url, external=bool(action.external)))

    def _handle_set_value(
        self, action: SetValueAction, context: RuntimeContext, result: DispatchResult, depth: int
    ) -> None:
        context.form_state.set(action.target_id, action.value)

    # =========================================================================
    # Data
    # =========================================================================

    def _handle_submit(
        self, action: SubmitAction, context: RuntimeContext, result: DispatchResult, depth: int
    ) -> None:
        if action.is_database:
            self._submit_to_database(action, context, result, depth)
        else:
            self._submit_remote(action, context, result, depth)

    def _submit_to_database(
        self, action: SubmitAction, context: RuntimeContext, result: DispatchResult, depth: int
    ) -> None:
        table = action.table
        if not table or not action.fields:
            logger.warning("Database submit needs both 'table' and 'fields'")
            self._follow_up(action.on_error, context, result, depth)
            return

        if not context.records.has_table(table):
            if table not in self.definition.table_names():
                logger.warning(f"Submit to unknown table '{table}' ignored")
                self._follow_up(action.on_error, context, result, depth)
                return
            context.records.ensure_tables([table])

        record = {
            field_name: context.form_state.get(field_id)
            for field_name, field_id in action.fields.items()
        }
        created = context.records.insert(table, record)
        context.form_state.clear_fields(action.fields.values())
        logger.info(f"Submitted record {created['id']} to '{table}'")

        self._follow_up(action.on_success, context, result, depth)

    def _submit_remote(
        self, action: SubmitAction, context: RuntimeContext, result: DispatchResult, depth: int
    ) -> None:
        endpoint = action.remote_endpoint
        if endpoint is None:
            logger.warning("Remote submit has no endpoint")
            self._follow_up(action.on_error, context, result, depth)
            return

        payload = {
            field_id: context.form_state.get(field_id)
            for field_id in (action.fields or {}).values()
        }

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No loop to defer onto: complete before returning
            logger.debug(f"No running event loop; submitting to {endpoint} inline")
            asyncio.run(
                self._complete_remote_submit(action, endpoint, payload, context, result, depth)
            )
            return

        completion = DispatchResult(context=context)
        task = loop.create_task(
            self._complete_remote_submit(
                action, endpoint, payload, context, completion, depth, publish=True
            )
        )
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        result.pending.append(task)

    async def _complete_remote_submit(
        self,
        action: SubmitAction,
        endpoint: str,
        payload: dict[str, Any],
        context: RuntimeContext,
        result: DispatchResult,
        depth: int,
        publish: bool = False,
    ) -> DispatchResult:
        try:
            await self._send(action, endpoint, payload)
            succeeded = True
        except SubmissionError as e:
            logger.warning(e.message)
            succeeded = False
        except Exception:
            logger.exception(f"Remote submit to {endpoint} failed")
            succeeded = False

        follow_up = action.on_success if succeeded else action.on_error
        self._run_chain(follow_up, context, result, depth + 1)

        if publish and self.effect_sink is not None:
            self.effect_sink(result)
        return result

    async def _send(self, action: SubmitAction, endpoint: str, payload: dict[str, Any]) -> Any:
        method = action.method or "POST"
        if not self.settings.serialize_remote_submits:
            return await self.submitter.submit(endpoint, payload, method=method, headers=action.headers)

        lock = self._submit_locks.setdefault(endpoint, asyncio.Lock())
        async with lock:
            return await self.submitter.submit(endpoint, payload, method=method, headers=action.headers)

    def _handle_delete_record(
        self, action: DeleteRecordAction, context: RuntimeContext, result: DispatchResult, depth: int
    ) -> None:
        if not context.records.has_table(action.table):
            logger.warning(f"Delete from unknown table '{action.table}' ignored")
            return
        if not context.records.delete(action.table, action.record_id):
            logger.debug(f"Record {action.record_id} not in '{action.table}'; nothing deleted")

    # =========================================================================
    # Authentication
    # =========================================================================

    def _handle_login(
        self, action: LoginAction, context: RuntimeContext, result: DispatchResult, depth: int
    ) -> None:
        auth = self.definition.auth_config
        if auth is None:
            logger.warning("auth:login dispatched but the app has no authentication config")
            return

        email = context.form_state.get(action.fields.email)
        password = context.form_state.get(action.fields.password)

        user = None
        if email not in (None, ""):
            user = context.records.find_first(
                auth.user_table,
                lambda row: row.get(auth.email_field) == email
                and self.credentials.verify(password, row.get(auth.password_field)),
            )

        if user is None:
            logger.info("Login failed: no user matches the submitted credentials")
            self._follow_up(action.on_error, context, result, depth)
            return

        context.login(user)
        context.navigate(auth.post_login_screen)
        context.form_state.reset()

    def _handle_signup(
        self, action: SignupAction, context: RuntimeContext, result: DispatchResult, depth: int
    ) -> None:
        auth = self.definition.auth_config
        if auth is None:
            logger.warning("auth:signup dispatched but the app has no authentication config")
            return

        email = context.form_state.get(action.fields.email)
        password = context.form_state.get(action.fields.password)
        if email in (None, "") or password in (None, ""):
            logger.info("Signup rejected: email and password are required")
            self._follow_up(action.on_error, context, result, depth)
            return

        existing = context.records.find_first(
            auth.user_table, lambda row: row.get(auth.email_field) == email
        )
        if existing is not None:
            logger.info("Signup rejected: email already registered")
            self._follow_up(action.on_error, context, result, depth)
            return

        user: dict[str, Any] = {}
        for key, field_id in action.fields.model_dump().items():
            if key == "email":
                user[auth.email_field] = email
            elif key == "password":
                try:
                    user[auth.password_field] = self.credentials.hash(str(password))
                except CredentialRejectedError as e:
                    logger.info(f"Signup rejected: {e.message}")
                    self._follow_up(action.on_error, context, result, depth)
                    return
            else:
                user[key] = context.form_state.get(field_id)

        context.records.ensure_tables([auth.user_table])
        created = context.records.insert(auth.user_table, user)

        context.login(created)
        context.navigate(auth.post_login_screen)
        context.form_state.reset()

    def _handle_logout(
        self, action: LogoutAction, context: RuntimeContext, result: DispatchResult, depth: int
    ) -> None:
        context.logout()
        if action.on_success is not None:
            self._follow_up(action.on_success, context, result, depth)
        else:
            context.navigate(self.definition.initial_screen)

    # =========================================================================
    # Pending Work
    # =========================================================================

    @property
    def has_pending(self) -> bool:
        return bool(self._pending)

    async def wait_for_pending(self) -> None:
        """Wait until every in-flight remote submit (and any it spawned) has completed."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

"""
Runtime Context

The mutable state an action runs against: record store, session, form
state and the active screen id. Passed explicitly into the dispatcher and
returned from it, so each test (and each preview) owns its own state.
"""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from uiruntime.models.contracts.runtime import Session
from uiruntime.services.form_state import FormState
from uiruntime.services.record_store import RecordStore

logger = logging.getLogger(__name__)


@dataclass
class RuntimeContext:
    """State of a running app."""

    records: RecordStore = field(default_factory=RecordStore)
    form_state: FormState = field(default_factory=FormState)
    session: Session | None = None
    active_screen_id: str | None = None

    @classmethod
    def create(
        cls,
        database_data: Mapping[str, Iterable[Mapping[str, Any]]] | None = None,
        *,
        tables: Iterable[str] = (),
        active_screen_id: str | None = None,
    ) -> "RuntimeContext":
        """Build a fresh context seeded from a ``databaseData`` snapshot."""
        records = RecordStore(database_data)
        records.ensure_tables(tables)
        return cls(records=records, active_screen_id=active_screen_id)

    @property
    def is_logged_in(self) -> bool:
        return self.session is not None

    def login(self, user: Mapping[str, Any]) -> None:
        """Replace the session with ``user``; at most one user is held."""
        self.session = Session(user=dict(user))
        logger.debug(f"Session started for user {user.get('id')}")

    def logout(self) -> None:
        self.session = None
        logger.debug("Session cleared")

    def navigate(self, screen_id: str) -> None:
        logger.debug(f"Active screen: {self.active_screen_id} -> {screen_id}")
        self.active_screen_id = screen_id

    def session_binding(self) -> dict[str, Any] | None:
        """Session in the shape templates see, or None."""
        return self.session.binding() if self.session else None

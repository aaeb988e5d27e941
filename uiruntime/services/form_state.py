"""
Form State Store

Field id -> current value for the active screen. Values survive
navigation; only submit/auth actions (or the host) clear them.
"""

import copy
from collections.abc import Iterable, Mapping
from typing import Any


class FormState:
    """Mutable mapping of form field values."""

    def __init__(self, initial: Mapping[str, Any] | None = None):
        self._values: dict[str, Any] = dict(initial or {})

    def get(self, field_id: str, default: Any = None) -> Any:
        return self._values.get(field_id, default)

    def set(self, field_id: str, value: Any) -> None:
        self._values[field_id] = value

    def update(self, partial: Mapping[str, Any]) -> None:
        """Merge ``partial`` into the current values."""
        self._values.update(partial)

    def clear_fields(self, field_ids: Iterable[str]) -> None:
        """Empty the named fields, leaving all others untouched."""
        for field_id in field_ids:
            self._values[field_id] = ""

    def reset(self) -> None:
        """Drop every value."""
        self._values = {}

    def snapshot(self) -> dict[str, Any]:
        return copy.deepcopy(self._values)

    def __contains__(self, field_id: object) -> bool:
        return field_id in self._values

    def __len__(self) -> int:
        return len(self._values)

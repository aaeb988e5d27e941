"""
Core Exceptions

Custom exceptions for the UI-JSON runtime.

None of these cross the dispatch boundary: the action dispatcher converts
them into the declarative onError branch or a logged no-op.
"""

from typing import Any


class UIRuntimeError(Exception):
    """Base class for runtime errors."""

    def __init__(self, message: str = "UI runtime error"):
        self.message = message
        super().__init__(self.message)


class InvalidDefinitionError(UIRuntimeError):
    """
    Raised when Application Definition text does not validate.

    Only the host-facing constructors raise this; the schema validator
    itself reports problems as data.

    Usage:
        try:
            runtime = AppRuntime.from_json(text)
        except InvalidDefinitionError as e:
            show_errors(e.errors)
    """

    def __init__(self, errors: list[Any]):
        self.errors = errors
        super().__init__(f"Application Definition is invalid ({len(errors)} error(s))")


class TableNotFoundError(UIRuntimeError):
    """Raised when a record store operation names an unknown table."""

    def __init__(self, table: str):
        self.table = table
        super().__init__(f"Table '{table}' does not exist")


class SubmissionError(UIRuntimeError):
    """Raised by the HTTP collaborator when a remote submit fails."""

    def __init__(self, endpoint: str, message: str, status_code: int | None = None):
        self.endpoint = endpoint
        self.status_code = status_code
        super().__init__(f"Submit to {endpoint} failed: {message}")


class ActionDepthExceededError(UIRuntimeError):
    """Raised when an action chain nests deeper than the configured cap."""

    def __init__(self, depth: int):
        self.depth = depth
        super().__init__(f"Action chain exceeded maximum depth of {depth}")


class CredentialRejectedError(UIRuntimeError):
    """Raised when a secret cannot be stored, e.g. bcrypt's 72-byte limit."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Credential rejected: {reason}")


class InvalidSeedDataError(UIRuntimeError):
    """Raised when a seed snapshot is not a mapping of table -> list of records."""

    def __init__(self, table: str, message: str):
        self.table = table
        super().__init__(f"Seed data for table '{table}' {message}")

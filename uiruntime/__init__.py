"""
UI-JSON Runtime

Interpreter for UI-JSON app definitions: validation, screen resolution,
token/template binding and declarative action dispatch.

    from uiruntime import AppRuntime

    runtime = AppRuntime.from_json(text, database_data)
    runtime.dispatch({"type": "navigate", "target": "home"})
"""

from uiruntime.core.exceptions import (
    ActionDepthExceededError,
    CredentialRejectedError,
    InvalidDefinitionError,
    SubmissionError,
    TableNotFoundError,
    UIRuntimeError,
)
from uiruntime.services.action_dispatcher import ActionDispatcher, DispatchResult
from uiruntime.services.app_runtime import AppRuntime
from uiruntime.services.runtime_context import RuntimeContext
from uiruntime.services.schema_validator import serialize_definition, validate_definition

__all__ = [
    "ActionDepthExceededError",
    "ActionDispatcher",
    "AppRuntime",
    "CredentialRejectedError",
    "DispatchResult",
    "InvalidDefinitionError",
    "RuntimeContext",
    "SubmissionError",
    "TableNotFoundError",
    "UIRuntimeError",
    "serialize_definition",
    "validate_definition",
]

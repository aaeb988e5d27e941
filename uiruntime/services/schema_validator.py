"""
Schema Validator

Turns raw UI-JSON text into an ApplicationDefinition or a list of
path/message errors. Never raises.

Two independent passes:
1. Structural validation (Pydantic): top-level shape and the closed enums
   for component types, database field types and action types. Fatal for
   rendering.
2. Reference check: screen ids, table names and design tokens that are
   used but not declared. Reported as warnings; the runtime resolves them
   lazily.
"""

import json
import logging
import re
from typing import Any

from pydantic import ValidationError
from pydantic_core import ErrorDetails

from uiruntime.config import Settings, get_settings
from uiruntime.models.contracts.actions import ACTION_TYPES
from uiruntime.models.contracts.app_definition import ApplicationDefinition
from uiruntime.models.contracts.runtime import (
    ReferenceReport,
    ValidationIssue,
    ValidationResult,
)

logger = logging.getLogger(__name__)

# Token references worth warning about ("$5.00" in body text is not one)
TOKEN_REFERENCE_PATTERN = re.compile(r"^\$([A-Za-z_][\w.-]*)$")


def format_validation_errors(errors: list[ErrorDetails]) -> list[ValidationIssue]:
    """
    Convert Pydantic error details into path/message issues.

    Args:
        errors: List of error details from ValidationError.errors()

    Returns:
        One ValidationIssue per error, path dotted from the error location
    """
    return [
        ValidationIssue(
            path=".".join(str(part) for part in error.get("loc", [])),
            message=error.get("msg", "validation error"),
        )
        for error in errors
    ]


def _too_deep() -> ValidationIssue:
    return ValidationIssue(path="", message="Definition is nested too deeply")


def parse_definition_text(
    text: str | bytes, settings: Settings | None = None
) -> tuple[Any, list[ValidationIssue]]:
    """
    Decode definition text into plain JSON data.

    Returns:
        Tuple of (data, errors). ``data`` is None when errors is non-empty.
    """
    settings = settings or get_settings()

    if isinstance(text, bytes):
        try:
            text = text.decode("utf-8")
        except UnicodeDecodeError as e:
            return None, [ValidationIssue(path="", message=f"Definition is not UTF-8: {e}")]

    try:
        size = len(text.encode("utf-8"))
    except UnicodeEncodeError as e:
        return None, [ValidationIssue(path="", message=f"Definition is not valid UTF-8 text: {e.reason}")]

    if size > settings.max_definition_bytes:
        return None, [
            ValidationIssue(
                path="",
                message=f"Definition is {size} bytes; the limit is {settings.max_definition_bytes}",
            )
        ]

    try:
        return json.loads(text), []
    except json.JSONDecodeError as e:
        return None, [
            ValidationIssue(
                path="",
                message=f"Invalid JSON: {e.msg} (line {e.lineno}, column {e.colno})",
            )
        ]
    except RecursionError:
        return None, [_too_deep()]


def validate_definition_data(data: Any) -> ValidationResult:
    """Validate already-decoded JSON data."""
    try:
        definition = ApplicationDefinition.model_validate(data)
    except ValidationError as e:
        errors = format_validation_errors(e.errors())
        logger.debug(f"Definition failed validation with {len(errors)} error(s)")
        return ValidationResult(errors=errors)
    except RecursionError:
        return ValidationResult(errors=[_too_deep()])

    try:
        report = find_dangling_references(definition)
    except RecursionError:
        return ValidationResult(errors=[_too_deep()])
    return ValidationResult(definition=definition, warnings=report.issues)


def validate_definition(text: str | bytes, settings: Settings | None = None) -> ValidationResult:
    """
    Validate Application Definition text.

    Args:
        text: Raw UI-JSON text
        settings: Optional settings override

    Returns:
        ValidationResult with either a definition (plus warnings) or errors
    """
    data, errors = parse_definition_text(text, settings)
    if errors:
        return ValidationResult(errors=errors)
    return validate_definition_data(data)


def serialize_definition(definition: ApplicationDefinition, indent: int | None = 2) -> str:
    """
    Re-emit a definition as UI-JSON text.

    Only keys present in the source are written (no defaults are added),
    and unrecognised keys are preserved.
    """
    return json.dumps(
        definition.model_dump(mode="json", by_alias=True, exclude_unset=True),
        indent=indent,
        ensure_ascii=False,
    )


# =============================================================================
# Reference Pass
# =============================================================================


class _ReferenceCollector:
    """Walks the dumped document collecting undeclared references."""

    def __init__(self, definition: ApplicationDefinition):
        self.definition = definition
        self.tables = set(definition.table_names())
        self.tokens = definition.design_tokens
        self.report = ReferenceReport()

    def screen(self, screen_id: Any, path: str) -> None:
        if not isinstance(screen_id, str) or self.definition.has_screen_reference(screen_id):
            return
        if screen_id not in self.report.missing_screens:
            self.report.missing_screens.append(screen_id)
        self.report.issues.append(
            ValidationIssue(path=path, message=f"Screen '{screen_id}' does not exist")
        )

    def table(self, table: Any, path: str) -> None:
        if not isinstance(table, str) or table in self.tables:
            return
        if table not in self.report.missing_tables:
            self.report.missing_tables.append(table)
        self.report.issues.append(
            ValidationIssue(
                path=path, message=f"Table '{table}' is not declared in app.databaseSchema"
            )
        )

    def token(self, value: str, path: str) -> None:
        match = TOKEN_REFERENCE_PATTERN.match(value)
        if not match or match.group(1) in self.tokens:
            return
        name = match.group(1)
        if name not in self.report.missing_tokens:
            self.report.missing_tokens.append(name)
        self.report.issues.append(
            ValidationIssue(
                path=path, message=f"Design token '{name}' is not defined in app.designTokens"
            )
        )

    def walk(self, node: Any, path: str) -> None:
        if isinstance(node, str):
            self.token(node, path)
            return

        if isinstance(node, list):
            for index, item in enumerate(node):
                self.walk(item, _join(path, index))
            return

        if not isinstance(node, dict):
            return

        node_type = node.get("type")
        if node_type in ACTION_TYPES:
            if node_type == "navigate":
                self.screen(node.get("target"), _join(path, "target"))
            if "screen" in node:
                self.screen(node.get("screen"), _join(path, "screen"))
            if node_type in ("submit", "deleteRecord") and node.get("table") is not None:
                self.table(node.get("table"), _join(path, "table"))

        data_source = node.get("dataSource")
        if isinstance(data_source, dict):
            self.table(data_source.get("table"), _join(path, "dataSource.table"))

        for key, value in node.items():
            self.walk(value, _join(path, key))


def _join(path: str, key: Any) -> str:
    return f"{path}.{key}" if path else str(key)


def find_dangling_references(definition: ApplicationDefinition) -> ReferenceReport:
    """
    Find screen, table and token references that are not declared.

    Checks initialScreen, the auth config's screens and user table, every
    action in every screen (including nested onSuccess/onError and popup
    button actions), list data sources, and ``$token`` values in screens
    and the theme.
    """
    collector = _ReferenceCollector(definition)

    collector.screen(definition.initial_screen, "initialScreen")

    auth = definition.auth_config
    if auth is not None:
        collector.screen(auth.post_login_screen, "app.authentication.postLoginScreen")
        collector.screen(auth.auth_redirect_screen, "app.authentication.authRedirectScreen")
        collector.table(auth.user_table, "app.authentication.userTable")

    if definition.app.theme is not None:
        collector.walk(
            definition.app.theme.model_dump(by_alias=True, exclude_unset=True), "app.theme"
        )

    for screen_id, screen in definition.screens.items():
        collector.walk(
            screen.model_dump(mode="json", by_alias=True, exclude_unset=True),
            f"screens.{screen_id}",
        )

    report = collector.report
    if report.issues:
        logger.warning(
            f"Definition has dangling references: screens={report.missing_screens} "
            f"tables={report.missing_tables} tokens={report.missing_tokens}"
        )
    return report

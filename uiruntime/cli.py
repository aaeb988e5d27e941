"""
UI-JSON Runtime CLI

Command-line interface for checking and replaying UI-JSON apps.

Commands:
  uiruntime validate  - Validate an Application Definition file
  uiruntime run       - Replay actions against an app and print the final state
"""

import json
import os
import sys
from typing import Any

from uiruntime.config import configure_logging, get_settings
from uiruntime.core.exceptions import InvalidSeedDataError
from uiruntime.models.contracts.runtime import Effect
from uiruntime.services.app_runtime import AppRuntime
from uiruntime.services.schema_validator import validate_definition


def main(args: list[str] | None = None) -> int:
    """
    Main CLI entry point.

    Args:
        args: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0 for success, 1 for error)
    """
    if args is None:
        args = sys.argv[1:]

    configure_logging(get_settings())

    # No args - show help
    if not args:
        print_help()
        return 0

    command = args[0].lower()

    if command in ("help", "-h", "--help"):
        print_help()
        return 0

    if command == "validate":
        return handle_validate(args[1:])

    if command == "run":
        return handle_run(args[1:])

    # Unknown command
    print(f"Unknown command: {command}", file=sys.stderr)
    print_help()
    return 1


def print_help() -> None:
    """Print CLI help message."""
    print("""
UI-JSON Runtime CLI - Validate and replay UI-JSON apps

Usage:
  uiruntime <command> [options]

Commands:
  validate    Validate an Application Definition file
  run         Replay a list of actions and print the resulting state
  help        Show this help message

Examples:
  uiruntime validate app.json
  uiruntime run app.json --data db.json --actions actions.json
""".strip())


def _read_text(path: str) -> str | None:
    if not os.path.isfile(path):
        print(f"Error: File not found: {path}", file=sys.stderr)
        return None
    with open(path, encoding="utf-8") as f:
        return f.read()


def _read_json(path: str, label: str) -> Any:
    text = _read_text(path)
    if text is None:
        return None
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        print(f"Error: Invalid JSON in {label} file: {e}", file=sys.stderr)
        return None


def handle_validate(args: list[str]) -> int:
    """
    Handle 'uiruntime validate <file>' command.

    Prints one line per error and warning.

    Returns:
        Exit code (0 if the definition is valid, 1 otherwise)
    """
    if not args:
        print("Error: No definition file specified", file=sys.stderr)
        print("Usage: uiruntime validate <file>", file=sys.stderr)
        return 1

    text = _read_text(args[0])
    if text is None:
        return 1

    result = validate_definition(text)

    for error in result.errors:
        print(f"error: {error}")
    for warning in result.warnings:
        print(f"warning: {warning}")

    if not result.success:
        print(f"{args[0]}: invalid ({len(result.errors)} error(s))", file=sys.stderr)
        return 1

    print(f"{args[0]}: valid ({len(result.warnings)} warning(s))")
    return 0


def handle_run(args: list[str]) -> int:
    """
    Handle 'uiruntime run <file>' command.

    Builds a runtime for the definition, replays each entry of the actions
    file in order, and prints the final screen, session, form state,
    records and emitted effects as JSON. An entry of the form
    ``{"setFormState": {...}}`` patches the form state instead of
    dispatching.

    Args:
        args: Command arguments [file, --data, --actions]

    Returns:
        Exit code (0 for success, 1 for error)
    """
    if not args:
        print("Error: No definition file specified", file=sys.stderr)
        print("Usage: uiruntime run <file> [--data FILE] [--actions FILE]", file=sys.stderr)
        return 1

    definition_file = args[0]
    data_file: str | None = None
    actions_file: str | None = None

    # Parse arguments
    i = 1
    while i < len(args):
        if args[i] in ("--data", "-d"):
            if i + 1 >= len(args):
                print("Error: --data requires a value", file=sys.stderr)
                return 1
            data_file = args[i + 1]
            i += 2
        elif args[i] in ("--actions", "-a"):
            if i + 1 >= len(args):
                print("Error: --actions requires a value", file=sys.stderr)
                return 1
            actions_file = args[i + 1]
            i += 2
        else:
            print(f"Unknown option: {args[i]}", file=sys.stderr)
            return 1

    text = _read_text(definition_file)
    if text is None:
        return 1

    database_data = None
    if data_file is not None:
        database_data = _read_json(data_file, "data")
        if not isinstance(database_data, dict):
            print("Error: Data file must contain an object of table -> records", file=sys.stderr)
            return 1

    actions: list[Any] = []
    if actions_file is not None:
        actions = _read_json(actions_file, "actions")
        if not isinstance(actions, list):
            print("Error: Actions file must contain a list", file=sys.stderr)
            return 1

    result = validate_definition(text)
    if not result.success:
        for error in result.errors:
            print(f"error: {error}", file=sys.stderr)
        return 1

    try:
        runtime = AppRuntime(result.definition, database_data)
    except InvalidSeedDataError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1
    effects: list[Effect] = []
    runtime.subscribe(effects.extend)

    for entry in actions:
        if isinstance(entry, dict) and "setFormState" in entry:
            runtime.set_form_state(entry["setFormState"] or {})
        else:
            runtime.dispatch(entry)

    screen = runtime.current_screen()
    output = {
        "screen": {
            "kind": screen.kind,
            "id": screen.screen_id,
            "authVariant": screen.auth_variant,
            "redirectedFrom": screen.redirected_from,
            "reason": screen.reason,
        },
        "session": runtime.session.model_dump(mode="json") if runtime.session else None,
        "formState": runtime.get_form_state(),
        "records": runtime.get_record_store(),
        "effects": [effect.model_dump(mode="json", by_alias=True) for effect in effects],
    }
    print(json.dumps(output, indent=2, default=str))
    return 0


if __name__ == "__main__":
    sys.exit(main())

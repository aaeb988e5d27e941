"""
Token and Template Resolution

Render-time substitution for component properties:

- ``"$primaryColor"`` is replaced by ``designTokens["primaryColor"]``
- ``"Hello {{ session.user.name }}"`` has each placeholder replaced by the
  value found at that path in the binding context

Both rules fail open: an unknown token stays as the literal string, and an
unresolvable path renders as an empty string.
"""

import json
import logging
import re
from collections.abc import Mapping
from typing import Any

logger = logging.getLogger(__name__)

TOKEN_PREFIX = "$"

# Matches {{ path }} placeholders (non-greedy, whitespace trimmed later)
TEMPLATE_PATTERN = re.compile(r"\{\{(.*?)\}\}")

# A string that is exactly one placeholder
SINGLE_PLACEHOLDER_PATTERN = re.compile(r"^\{\{(.*?)\}\}$")

_MISSING = object()


# =============================================================================
# Design Tokens
# =============================================================================


def is_token_reference(value: Any) -> bool:
    """Check if a value is a ``$token`` reference."""
    return isinstance(value, str) and value.startswith(TOKEN_PREFIX) and len(value) > 1


def resolve_token(value: Any, tokens: Mapping[str, Any] | None) -> Any:
    """
    Resolve a design token reference.

    Example: "$primaryColor" with {"primaryColor": "#FF0000"} => "#FF0000"

    Non-token values and unknown tokens are returned unchanged.
    """
    if not is_token_reference(value):
        return value
    token_name = value[len(TOKEN_PREFIX):]
    if tokens and token_name in tokens and tokens[token_name] is not None:
        return tokens[token_name]
    return value


def resolve_all_tokens(obj: Any, tokens: Mapping[str, Any] | None) -> Any:
    """Resolve all tokens in an object recursively."""
    if isinstance(obj, str):
        return resolve_token(obj, tokens)
    if isinstance(obj, list):
        return [resolve_all_tokens(item, tokens) for item in obj]
    if isinstance(obj, Mapping):
        return {key: resolve_all_tokens(value, tokens) for key, value in obj.items()}
    return obj


def find_missing_tokens(obj: Any, tokens: Mapping[str, Any] | None) -> list[str]:
    """Return token names referenced in ``obj`` that ``tokens`` does not define."""
    missing: dict[str, None] = {}

    def check(value: Any) -> None:
        if is_token_reference(value):
            name = value[len(TOKEN_PREFIX):]
            if not tokens or name not in tokens:
                missing[name] = None
        elif isinstance(value, list):
            for item in value:
                check(item)
        elif isinstance(value, Mapping):
            for item in value.values():
                check(item)

    check(obj)
    return list(missing)


# =============================================================================
# Templates
# =============================================================================


def get_nested_value(obj: Any, path: str) -> Any:
    """
    Get a nested value using dot notation.

    Example: get_nested_value({"user": {"name": "John"}}, "user.name") => "John"

    Dicts are walked by key and lists by integer index. Returns None when
    any segment is missing.
    """
    value = _walk(obj, path)
    return None if value is _MISSING else value


def _walk(obj: Any, path: str) -> Any:
    current = obj
    for key in path.split("."):
        if isinstance(current, Mapping):
            current = current.get(key, _MISSING)
        elif isinstance(current, (list, tuple)):
            try:
                current = current[int(key)]
            except (ValueError, IndexError):
                return _MISSING
        else:
            return _MISSING
        if current is _MISSING or current is None:
            return _MISSING
    return current


def stringify(value: Any) -> str:
    """Render a resolved value as text the way the preview displays it."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (dict, list)):
        return json.dumps(value, default=str)
    return str(value)


def interpolate_string(template: str, context: Mapping[str, Any]) -> str:
    """
    Interpolate ``{{path}}`` placeholders.

    Example: "Hello {{name}}" with {"name": "World"} => "Hello World"
    """
    return TEMPLATE_PATTERN.sub(
        lambda match: stringify(get_nested_value(context, match.group(1).strip())),
        template,
    )


def resolve_template(template: Any, context: Mapping[str, Any]) -> Any:
    """
    Resolve templates in any type of value (string, dict, list).

    A string that is exactly one placeholder resolves to the raw value so
    numbers, booleans and ids keep their type; an unresolvable path
    resolves to "".
    """
    if isinstance(template, str):
        single = SINGLE_PLACEHOLDER_PATTERN.match(template)
        if single and "{{" not in single.group(1):
            value = get_nested_value(context, single.group(1).strip())
            return "" if value is None else value
        if has_template_variables(template):
            return interpolate_string(template, context)
        return template

    if isinstance(template, list):
        return [resolve_template(item, context) for item in template]

    if isinstance(template, Mapping):
        return {key: resolve_template(value, context) for key, value in template.items()}

    return template


def has_template_variables(value: Any) -> bool:
    """Check if a string contains template variables."""
    return isinstance(value, str) and TEMPLATE_PATTERN.search(value) is not None


def extract_template_variables(value: str) -> list[str]:
    """Extract all template variable paths from a string."""
    return [match.strip() for match in TEMPLATE_PATTERN.findall(value)]


# =============================================================================
# Combined Resolution
# =============================================================================


def build_binding_context(
    session: Mapping[str, Any] | None = None,
    record: Mapping[str, Any] | None = None,
    **extra: Any,
) -> dict[str, Any]:
    """
    Build the context templates are resolved against.

    Record fields sit at the top level (``{{title}}``); the session is
    exposed as ``session`` (``{{session.user.email}}``) and is None when
    nobody is logged in.
    """
    context: dict[str, Any] = dict(record or {})
    context.update(extra)
    context["session"] = dict(session) if session is not None else None
    return context


def resolve(value: Any, context: Mapping[str, Any], tokens: Mapping[str, Any] | None = None) -> Any:
    """
    Resolve a property value at render time.

    Tokens are applied first, then templates, recursively through dicts
    and lists.
    """
    if isinstance(value, str):
        return resolve_template(resolve_token(value, tokens), context)
    if isinstance(value, list):
        return [resolve(item, context, tokens) for item in value]
    if isinstance(value, Mapping):
        return {key: resolve(item, context, tokens) for key, item in value.items()}
    return value

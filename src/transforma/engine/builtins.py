"""Built-in step functions.

Pure, polymorphic content transforms usable as ``"type": "built-in"``
steps without an external script. Every function takes
``(content, options)`` and returns the new content.
"""

import json
import re
from typing import Any, Callable

from transforma.exceptions import UnknownBuiltinFunctionError

BuiltinFunction = Callable[[Any, dict[str, Any]], Any]

PLACEHOLDER_PATTERN = re.compile(r"\{\{\s*([^{}]*?)\s*\}\}")


def _map_strings(content: Any, fn: Callable[[str], str]) -> Any:
    # One level deep: nested containers pass through unchanged
    if isinstance(content, str):
        return fn(content)
    if isinstance(content, list):
        return [fn(item) if isinstance(item, str) else item for item in content]
    if isinstance(content, dict):
        return {key: fn(value) if isinstance(value, str) else value for key, value in content.items()}
    return content


def to_upper_case(content: Any, options: dict[str, Any]) -> Any:
    return _map_strings(content, str.upper)


def to_lower_case(content: Any, options: dict[str, Any]) -> Any:
    return _map_strings(content, str.lower)


def _stringify(value: Any) -> str:
    if isinstance(value, str):
        return value
    if value is None or isinstance(value, (bool, dict, list)):
        return json.dumps(value)
    return str(value)


def render_template(content: Any, options: dict[str, Any]) -> Any:
    """Replace ``{{ key }}`` placeholders with values from options.

    Placeholders whose key is not in options are left untouched.
    Non-string content passes through unchanged.
    """
    if not isinstance(content, str):
        return content

    def replace(match: re.Match[str]) -> str:
        key = match.group(1)
        if key in options:
            return _stringify(options[key])
        return match.group(0)

    return PLACEHOLDER_PATTERN.sub(replace, content)


def select_fields(content: Any, options: dict[str, Any]) -> Any:
    """Project each record of a list onto ``options["fields"]``."""
    fields = options.get("fields") or []
    if not fields or not isinstance(content, list):
        return content
    return [
        {field: item.get(field) for field in fields} if isinstance(item, dict) else item
        for item in content
    ]


def filter_records(content: Any, options: dict[str, Any]) -> Any:
    """Keep records whose ``fieldName`` equals ``value``."""
    field_name = options.get("fieldName")
    if not field_name or not isinstance(content, list):
        return content
    value = options.get("value")
    return [item for item in content if isinstance(item, dict) and item.get(field_name) == value]


def sort_records(content: Any, options: dict[str, Any]) -> Any:
    """Stable sort of records by ``fieldName``; records missing it go last."""
    field_name = options.get("fieldName")
    if not field_name or not isinstance(content, list):
        return content
    ascending = options.get("ascending", True) is not False

    present, missing = [], []
    for item in content:
        if isinstance(item, dict) and item.get(field_name) is not None:
            present.append(item)
        else:
            missing.append(item)
    try:
        ordered = sorted(present, key=lambda item: item[field_name], reverse=not ascending)
    except TypeError:
        # Mixed value types: fall back to comparing their text
        ordered = sorted(present, key=lambda item: str(item[field_name]), reverse=not ascending)
    return ordered + missing


def identity(content: Any, options: dict[str, Any]) -> Any:
    return content


BUILTIN_FUNCTIONS: dict[str, BuiltinFunction] = {
    "toUpperCase": to_upper_case,
    "toLowerCase": to_lower_case,
    "template": render_template,
    "selectFields": select_fields,
    "filter": filter_records,
    "sort": sort_records,
    "identity": identity,
}


def get_builtin(name: str) -> BuiltinFunction:
    """Look up a built-in function by its registered name.

    Raises:
        UnknownBuiltinFunctionError: If no function is registered under name
    """
    try:
        return BUILTIN_FUNCTIONS[name]
    except KeyError:
        raise UnknownBuiltinFunctionError(name) from None


def apply_builtin(name: str, content: Any, options: dict[str, Any]) -> Any:
    return get_builtin(name)(content, options)


def list_builtins() -> list[str]:
    return sorted(BUILTIN_FUNCTIONS)

"""Content codec: file text <-> structured values, by extension.

Parsing:
    .json  strict JSON, no fallback on malformed input
    .csv   header row + positional rows of trimmed strings
    other  raw text

A custom parser registered in wfconfig.py for the extension wins; when it
raises, the failure is logged and the default parser is used instead.
Formatting follows the same rule with custom formatters.
"""

import json
from pathlib import Path
from typing import Any, Callable

from transforma.core.schemas import CustomConfig
from transforma.exceptions import (
    ContentFormatError,
    ContentParseError,
    CustomFormatterError,
    CustomParserError,
)
from transforma.logger import RunLogger

DEFAULT_FORMATTER_KEY = "default"


def extension_of(path: Path) -> str:
    """Lowercased extension without the dot ('' when there is none)."""
    return path.suffix.lower().lstrip(".")


def parse_csv_text(text: str, delimiter: str = ",") -> list[dict[str, str]]:
    """Parse CSV text into a list of header -> value mappings.

    Blank lines are ignored. Missing trailing fields map to "", extra
    fields are dropped. No quoting rules apply.
    """
    # Only "\n" separates rows; a trailing "\r" goes away with strip()
    lines = [line for line in text.split("\n") if line.strip()]
    if not lines:
        return []

    headers = [header.strip() for header in lines[0].split(delimiter)]
    rows = []
    for line in lines[1:]:
        values = line.split(delimiter)
        rows.append(
            {
                header: values[index].strip() if index < len(values) else ""
                for index, header in enumerate(headers)
            }
        )
    return rows


def _parse_json_text(text: str, path: Path) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise ContentParseError(str(path), f"invalid JSON ({e})") from e


def _default_parse(text: str, path: Path, custom_config: CustomConfig) -> Any:
    extension = extension_of(path)
    if extension == "json":
        return _parse_json_text(text, path)
    if extension == "csv":
        return parse_csv_text(text, custom_config.input.csv_delimiter)
    return text


def _read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ContentParseError(str(path), str(e)) from e


def parse_content(path: Path, custom_config: CustomConfig, logger: RunLogger) -> Any:
    """Read ``path`` and parse it into a content value.

    Raises:
        ContentParseError: If the file cannot be read, or is malformed JSON
    """
    text = _read_text(path)
    extension = extension_of(path)

    custom_parser = custom_config.input.parsers.get(extension)
    if custom_parser is not None:
        try:
            return custom_parser(text)
        except Exception as e:
            failure = CustomParserError(extension, str(e))
            logger.warning(f"{failure}; falling back to default parser")

    return _default_parse(text, path, custom_config)


def default_format(value: Any, json_indent: int = 2) -> str:
    """Structured values become indented JSON, anything else its plain text."""
    if isinstance(value, (dict, list)):
        return json.dumps(value, indent=json_indent, ensure_ascii=False)
    if value is None or isinstance(value, bool):
        return json.dumps(value)
    return str(value)


def _select_formatter(
    extension: str, custom_config: CustomConfig
) -> tuple[str, Callable[[Any], str]] | None:
    formatters = custom_config.output.formatters
    candidates = [extension, custom_config.output.default_format, DEFAULT_FORMATTER_KEY]
    for key in candidates:
        if key and key in formatters:
            return key, formatters[key]
    return None


def format_content(
    value: Any, extension: str, custom_config: CustomConfig, logger: RunLogger
) -> bytes:
    """Format a content value for an output file with ``extension``.

    Raises:
        ContentFormatError: If the value cannot be serialized by default formatting
    """
    selected = _select_formatter(extension.lstrip(".").lower(), custom_config)
    if selected is not None:
        name, formatter = selected
        try:
            text = formatter(value)
            if not isinstance(text, str):
                raise TypeError(f"formatter returned {type(text).__name__}, expected str")
            return text.encode("utf-8")
        except Exception as e:
            failure = CustomFormatterError(name, str(e))
            logger.warning(f"{failure}; falling back to default formatting")

    try:
        return default_format(value, custom_config.output.json_indent).encode("utf-8")
    except (TypeError, ValueError) as e:
        raise ContentFormatError(str(e)) from e

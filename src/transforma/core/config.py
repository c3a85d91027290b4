"""Loading of workflow.json and the optional wfconfig.py."""

import hashlib
import importlib.util
import json
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from transforma.core.schemas import CustomConfig, WorkflowConfig
from transforma.exceptions import ConfigNotFoundError, ConfigParseError
from transforma.logger import RunLogger

CUSTOM_CONFIG_FILENAME = "wfconfig.py"

YAML_SUFFIXES = (".yaml", ".yml")


def load_workflow_config(config_path: Path) -> WorkflowConfig:
    """Load and validate a workflow configuration file.

    JSON is the canonical format; ``.yaml``/``.yml`` files are read with
    PyYAML and validated against the same schema.

    Raises:
        ConfigNotFoundError: If the file does not exist
        ConfigParseError: If the file is malformed or fails validation
    """
    if not config_path.is_file():
        raise ConfigNotFoundError(str(config_path))

    try:
        text = config_path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigParseError(str(config_path), str(e)) from e

    try:
        if config_path.suffix.lower() in YAML_SUFFIXES:
            data = yaml.safe_load(text)
        else:
            data = json.loads(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigParseError(str(config_path), str(e)) from e

    if not isinstance(data, dict):
        raise ConfigParseError(str(config_path), "top-level value must be an object")

    try:
        return WorkflowConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigParseError(str(config_path), _summarize_validation_error(e)) from e


def _summarize_validation_error(error: ValidationError) -> str:
    parts = []
    for item in error.errors():
        location = ".".join(str(part) for part in item["loc"]) or "<root>"
        parts.append(f"{location}: {item['msg']}")
    return "; ".join(parts)


def resolve_workflow_path(path: str, workflow_dir: Path) -> Path:
    """Resolve a config-relative path; absolute paths are kept."""
    candidate = Path(path).expanduser()
    if candidate.is_absolute():
        return candidate
    return (workflow_dir / candidate).resolve()


def load_custom_config(workflow_dir: Path, logger: RunLogger) -> CustomConfig:
    """Load wfconfig.py from the workflow directory, best-effort.

    The module may expose ``input``, ``output`` and ``options`` dicts at
    module level, or a single ``config`` dict holding those keys. Any
    failure is logged and an empty CustomConfig is returned.
    """
    config_path = workflow_dir / CUSTOM_CONFIG_FILENAME
    if not config_path.is_file():
        return CustomConfig()

    try:
        data = _read_custom_config_module(config_path)
        custom = CustomConfig.model_validate(data)
    except Exception as e:
        logger.warning(f"Failed to load custom configuration: {e}")
        return CustomConfig()

    logger.info(f"Loaded custom workflow configuration from {config_path}")
    return custom


def _read_custom_config_module(config_path: Path) -> dict[str, Any]:
    # Unique module name per path so two workflows never share a cached module
    digest = hashlib.sha256(str(config_path.resolve()).encode()).hexdigest()[:12]
    spec = importlib.util.spec_from_file_location(f"transforma_wfconfig_{digest}", config_path)
    if spec is None or spec.loader is None:
        raise ImportError(f"Cannot import {config_path}")

    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)

    exported = getattr(module, "config", None)
    if isinstance(exported, dict):
        return exported

    return {
        key: getattr(module, key)
        for key in ("input", "output", "options")
        if isinstance(getattr(module, key, None), dict)
    }

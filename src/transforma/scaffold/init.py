"""Workflow scaffolding."""

import json
from pathlib import Path

from transforma.core.config import CUSTOM_CONFIG_FILENAME
from transforma.core.schemas import WorkflowConfig, WorkflowStep
from transforma.exceptions import ConfigurationError
from transforma.scaffold.template_render import render_workflow_template

WORKFLOW_CONFIG_FILENAME = "workflow.json"
DEFAULT_INPUT_DIR = "data/input"
DEFAULT_OUTPUT_DIR = "data/output"
DEFAULT_SCRIPT = "scripts/transform.py"


def default_workflow_config(name: str) -> WorkflowConfig:
    """Starter configuration: one transform step with skip_existing on."""
    return WorkflowConfig(
        name=name,
        description=f"Workflow for {name}",
        version="1.0.0",
        input_dir=DEFAULT_INPUT_DIR,
        output_dir=DEFAULT_OUTPUT_DIR,
        steps=[
            WorkflowStep(
                name="transform",
                type="transform",
                function=DEFAULT_SCRIPT,
                options={},
                skip_existing=True,
            )
        ],
    )


def save_workflow_config(config_path: Path, config: WorkflowConfig) -> None:
    """Save workflow configuration as indented JSON."""
    config_path.parent.mkdir(parents=True, exist_ok=True)
    data = config.model_dump(mode="json", exclude_none=True)
    config_path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")


def create_workflow(name: str, workflow_dir: Path) -> Path:
    """Create a runnable workflow skeleton.

    Creates:
    - workflow.json
    - data/input/ and data/output/
    - scripts/transform.py (identity transform)
    - wfconfig.py (custom parsers and formatters, all optional)

    Returns:
        Path to the created workflow.json

    Raises:
        ConfigurationError: If workflow_dir already holds a workflow.json
    """
    config_path = workflow_dir / WORKFLOW_CONFIG_FILENAME
    if config_path.exists():
        raise ConfigurationError(f"Workflow already exists: {config_path}")

    config = default_workflow_config(name)

    (workflow_dir / config.input_dir).mkdir(parents=True, exist_ok=True)
    (workflow_dir / config.output_dir).mkdir(parents=True, exist_ok=True)

    script_path = workflow_dir / DEFAULT_SCRIPT
    script_path.parent.mkdir(parents=True, exist_ok=True)
    if not script_path.exists():
        script_path.write_text(render_workflow_template("transform.py.j2", name=name), encoding="utf-8")

    custom_config_path = workflow_dir / CUSTOM_CONFIG_FILENAME
    if not custom_config_path.exists():
        custom_config_path.write_text(render_workflow_template("wfconfig.py.j2", name=name), encoding="utf-8")

    save_workflow_config(config_path, config)
    return config_path

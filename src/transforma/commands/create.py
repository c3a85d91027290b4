"""Create command implementation."""

from pathlib import Path

from transforma.display import print_error, print_workflow_created
from transforma.exceptions import TransformaError
from transforma.scaffold.init import create_workflow


def create_command(name: str, directory: Path | None) -> None:
    """Scaffold a new workflow in ``directory`` (defaults to ./<name>)."""
    if not name.strip():
        print_error("Workflow name cannot be empty")
        raise SystemExit(1)

    workflow_dir = directory if directory is not None else Path.cwd() / name
    try:
        config_path = create_workflow(name, workflow_dir)
    except (TransformaError, OSError) as e:
        print_error(f"Failed to create workflow: {e}")
        raise SystemExit(1) from e

    print_workflow_created(config_path, name)

"""Jinja2 rendering for workflow scaffolds and the sandbox harness."""

from functools import lru_cache
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined

TEMPLATES_DIR = Path(__file__).parent / "templates"


@lru_cache(maxsize=1)
def _get_environment() -> Environment:
    # StrictUndefined: a missing variable must fail rendering, never emit ""
    return Environment(
        loader=FileSystemLoader(str(TEMPLATES_DIR)),
        keep_trailing_newline=True,
        undefined=StrictUndefined,
    )


def _render(group: str, template_name: str, context: dict[str, Any]) -> str:
    template = _get_environment().get_template(f"{group}/{template_name}")
    return template.render(**context)  # type: ignore[no-any-return]


def render_workflow_template(template_name: str, **context: Any) -> str:
    """Render a file of a new workflow (e.g. "transform.py.j2").

    Args:
        template_name: File name under templates/workflow
        **context: Template variables (``name`` is the workflow name)
    """
    return _render("workflow", template_name, context)


def render_sandbox_template(template_name: str, **context: Any) -> str:
    """Render a sandbox template (e.g. "harness.py.j2").

    Values are inserted verbatim, so callers pass Python literals
    (``repr()`` of the real values).
    """
    return _render("sandbox", template_name, context)

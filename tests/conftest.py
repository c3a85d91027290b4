"""Shared pytest fixtures for transforma tests.

Provides fixtures for mocking engine components and building workflows
on disk.
"""

import json
from pathlib import Path
from typing import Any, Callable

import pytest

from transforma.engine import Container
from transforma.engine.mocks import MockSandbox
from transforma.logger import ListLogger


@pytest.fixture(autouse=True)
def reset_container():
    """Keep Container overrides from leaking between tests."""
    yield
    Container.reset()


@pytest.fixture
def list_logger() -> ListLogger:
    """Fixture that installs a capturing logger via Container.

    Yields:
        ListLogger recording every (level, message) pair
    """
    logger = ListLogger()
    Container.set_logger(logger)
    yield logger
    Container.reset()


@pytest.fixture
def mock_sandbox() -> MockSandbox:
    """Fixture that sets up and tears down a mock sandbox via Container.

    Yields:
        MockSandbox returning content unchanged
    """
    sandbox = MockSandbox()
    Container.set_sandbox(sandbox)
    yield sandbox
    Container.reset()


WorkflowFactory = Callable[..., Path]


@pytest.fixture
def make_workflow(tmp_path: Path) -> WorkflowFactory:
    """Factory writing a workflow.json plus input files under tmp_path.

    Usage:
        config_path = make_workflow(
            steps=[{"name": "up", "type": "built-in", "function": "toUpperCase"}],
            files={"a.json": '{"name": "alice"}'},
        )
    """

    def factory(
        steps: list[dict[str, Any]] | None = None,
        files: dict[str, str] | None = None,
        scripts: dict[str, str] | None = None,
        wfconfig: str | None = None,
        **extra: Any,
    ) -> Path:
        workflow_dir = tmp_path / "workflow"
        input_dir = workflow_dir / "data" / "input"
        input_dir.mkdir(parents=True, exist_ok=True)

        for name, text in (files or {}).items():
            (input_dir / name).write_text(text, encoding="utf-8")

        for name, source in (scripts or {}).items():
            script_path = workflow_dir / name
            script_path.parent.mkdir(parents=True, exist_ok=True)
            script_path.write_text(source, encoding="utf-8")

        if wfconfig is not None:
            (workflow_dir / "wfconfig.py").write_text(wfconfig, encoding="utf-8")

        config = {
            "name": "test-workflow",
            "input_dir": "data/input",
            "output_dir": "data/output",
            "steps": steps or [],
            **extra,
        }
        config_path = workflow_dir / "workflow.json"
        config_path.write_text(json.dumps(config), encoding="utf-8")
        return config_path

    return factory

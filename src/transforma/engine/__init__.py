"""Execution engine for workflows.

- WorkflowRunner: drives a run with an injected sandbox and logger
- ScriptSandbox: protocol for out-of-process script execution
- Container: composition root binding the default implementations

For simple use cases, use run_workflow().
"""

from pathlib import Path

from transforma.engine.container import Container
from transforma.engine.protocols import FileOutcome, FileState, RunResult, ScriptSandbox
from transforma.engine.runner import RunContext, RunPolicy, WorkflowRunner
from transforma.engine.sandbox import LOG_TAG, SubprocessSandbox


def run_workflow(
    config_path: Path,
    force: bool = False,
    *,
    policy: RunPolicy | None = None,
    timeout: float | None = None,
) -> RunResult:
    """Run a workflow with the default dependencies from Container."""
    runner = Container.workflow_runner(timeout=timeout)
    return runner.run(config_path, force, policy=policy)


__all__ = [
    # Core classes
    "WorkflowRunner",
    "RunPolicy",
    "RunContext",
    # Protocols and types
    "ScriptSandbox",
    "RunResult",
    "FileOutcome",
    "FileState",
    # Implementations
    "SubprocessSandbox",
    "Container",
    # Functions
    "run_workflow",
    # Constants
    "LOG_TAG",
]

"""Protocols and result types for the workflow execution engine.

Defines the contract for script sandboxes and the immutable records a run
produces, enabling dependency injection and testability.
"""

from enum import Enum
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict


class FileState(str, Enum):
    """Per-file processing state.

    pending -> parsing -> stepping -> formatting -> written, with skipped
    and failed as the other terminal states.
    """

    PENDING = "pending"
    PARSING = "parsing"
    STEPPING = "stepping"
    FORMATTING = "formatting"
    WRITTEN = "written"
    SKIPPED = "skipped"
    FAILED = "failed"


class FileOutcome(BaseModel):
    """Terminal result of processing one input file."""

    model_config = ConfigDict(frozen=True)

    input_path: Path
    state: FileState
    output_path: Path | None = None
    failed_in: FileState | None = None
    error: str | None = None


class RunResult(BaseModel):
    """Result of a workflow run.

    Frozen because results are immutable facts about past executions.
    """

    model_config = ConfigDict(frozen=True)

    workflow: str
    files: list[FileOutcome]
    duration_seconds: float

    @property
    def processed_count(self) -> int:
        return sum(1 for f in self.files if f.state == FileState.WRITTEN)

    @property
    def skipped_count(self) -> int:
        return sum(1 for f in self.files if f.state == FileState.SKIPPED)

    @property
    def failed_count(self) -> int:
        return sum(1 for f in self.files if f.state == FileState.FAILED)


@runtime_checkable
class ScriptSandbox(Protocol):
    """Protocol for out-of-process script execution.

    Implementations run one user transformation script and return its
    JSON-decoded result, raising ExecutionError subclasses on failure.
    """

    def execute(
        self,
        script_path: Path,
        content: Any,
        options: dict[str, Any],
        timeout: float | None = None,
        cwd: Path | None = None,
    ) -> Any:
        """Run ``script_path`` on ``content`` and return its result."""
        ...

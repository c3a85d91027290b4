"""Workflow runner with dependency injection.

WorkflowRunner drives a run: load the workflow, discover input files and
fold every file through the ordered steps, writing one output per file.
The script sandbox and the logger are injected so tests can replace them.
"""

import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict

from transforma.core.config import load_custom_config, load_workflow_config, resolve_workflow_path
from transforma.core.schemas import CustomConfig, StepType, WorkflowConfig, WorkflowStep
from transforma.engine.builtins import apply_builtin
from transforma.engine.codec import format_content, parse_content
from transforma.engine.discovery import list_input_files, output_path_for
from transforma.engine.protocols import FileOutcome, FileState, RunResult, ScriptSandbox
from transforma.exceptions import (
    StepError,
    TransformaError,
    UnknownStepTypeError,
    WorkflowAbortedError,
    WriteError,
)
from transforma.logger import RunLogger


class RunPolicy(BaseModel):
    """How a run treats existing outputs and per-file failures.

    ``--force`` historically meant both at once; they are kept apart here
    and ``from_force`` reproduces the combined behavior.
    """

    model_config = ConfigDict(frozen=True)

    reprocess_existing: bool = False
    continue_on_error: bool = False

    @classmethod
    def from_force(cls, force: bool) -> "RunPolicy":
        return cls(reprocess_existing=force, continue_on_error=force)


@dataclass(frozen=True)
class RunContext:
    """Everything one run needs; built once per run, never mutated."""

    workflow_dir: Path
    input_dir: Path
    output_dir: Path
    policy: RunPolicy
    custom_config: CustomConfig
    logger: RunLogger
    timeout: float | None = None


@dataclass
class _FileProgress:
    """Mutable per-file state tracker, local to one file's processing."""

    input_path: Path
    state: FileState = FileState.PENDING
    output_path: Path | None = None
    content: Any = None
    parsed: bool = False


class WorkflowRunner:
    """Executes workflows with injected dependencies.

    Separates orchestration from:
    - Script execution (sandbox implementation)
    - Output reporting (logger implementation)
    """

    def __init__(
        self,
        sandbox: ScriptSandbox,
        logger: RunLogger,
        timeout: float | None = None,
    ) -> None:
        """Initialize runner with dependencies.

        Args:
            sandbox: Executes transform scripts out of process
            logger: Receives leveled run messages
            timeout: Deadline in seconds for each script call (None for no limit)
        """
        self._sandbox = sandbox
        self._logger = logger
        self._timeout = timeout

    def run(
        self,
        config_path: Path,
        force: bool = False,
        *,
        policy: RunPolicy | None = None,
    ) -> RunResult:
        """Run the workflow described by ``config_path``.

        Args:
            config_path: Path to workflow.json (or .yaml)
            force: Shorthand for RunPolicy.from_force(force)
            policy: Explicit policy; overrides ``force`` when given

        Returns:
            RunResult with one FileOutcome per input file

        Raises:
            ConfigNotFoundError, ConfigParseError: If the workflow cannot be loaded
            WriteError: If the output directory cannot be created
            WorkflowAbortedError: If a file fails and errors are not tolerated
        """
        started = time.monotonic()
        if policy is None:
            policy = RunPolicy.from_force(force)

        config_path = Path(config_path).expanduser().resolve()
        config = load_workflow_config(config_path)
        self._logger.info(f"Loaded workflow configuration from {config_path}")

        context = self._build_context(config, config_path, policy)
        self._log_policy(config, context)

        input_files = list_input_files(context.input_dir, self._logger)
        if not input_files:
            self._logger.warning(f"No files found in input directory: {context.input_dir}")
            return RunResult(workflow=config.name, files=[], duration_seconds=time.monotonic() - started)

        self._logger.info(f"Found {len(input_files)} files to process")

        outcomes: list[FileOutcome] = []
        for file_path in input_files:
            outcomes.append(self._run_file(file_path, config, context))

        result = RunResult(
            workflow=config.name,
            files=outcomes,
            duration_seconds=time.monotonic() - started,
        )
        if result.failed_count:
            self._logger.warning(
                f"Workflow completed with {result.failed_count} failed files "
                f"({result.processed_count} files processed)"
            )
        else:
            self._logger.success(
                f"Workflow completed successfully ({result.processed_count} files processed)"
            )
        return result

    def _build_context(self, config: WorkflowConfig, config_path: Path, policy: RunPolicy) -> RunContext:
        workflow_dir = config_path.parent
        input_dir = resolve_workflow_path(config.input_dir, workflow_dir)
        output_dir = resolve_workflow_path(config.output_dir, workflow_dir)

        self._logger.info(f"Using workflow directory: {workflow_dir}")
        self._logger.info(f"Using input directory: {input_dir}")
        self._logger.info(f"Using output directory: {output_dir}")

        custom_config = load_custom_config(workflow_dir, self._logger)

        try:
            output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise WriteError(str(output_dir), str(e)) from e

        return RunContext(
            workflow_dir=workflow_dir,
            input_dir=input_dir,
            output_dir=output_dir,
            policy=policy,
            custom_config=custom_config,
            logger=self._logger,
            timeout=self._timeout,
        )

    def _log_policy(self, config: WorkflowConfig, context: RunContext) -> None:
        if context.policy.reprocess_existing:
            for step in config.steps:
                if step.skip_existing:
                    context.logger.warning(f"Reprocessing enabled, ignoring skip_existing for step: {step.name}")
        if context.policy.continue_on_error:
            context.logger.info("Per-file errors will be logged and skipped")

    def _run_file(self, file_path: Path, config: WorkflowConfig, context: RunContext) -> FileOutcome:
        progress = _FileProgress(input_path=file_path)
        try:
            return self._process_file(progress, config, context)
        except TransformaError as e:
            context.logger.error(f"Failed to process file {file_path.name}: {e}")
            if not context.policy.continue_on_error:
                raise WorkflowAbortedError(file_path.name, e) from e
            return FileOutcome(
                input_path=file_path,
                state=FileState.FAILED,
                output_path=progress.output_path,
                failed_in=progress.state,
                error=str(e),
            )

    def _process_file(self, progress: _FileProgress, config: WorkflowConfig, context: RunContext) -> FileOutcome:
        """Fold one file through the steps and write the result."""
        file_path = progress.input_path
        output_path = output_path_for(file_path, context.output_dir, config.output_naming)
        progress.output_path = output_path

        for step in config.steps:
            if step.skip_existing and not context.policy.reprocess_existing and output_path.exists():
                context.logger.warning(f"Skipping already processed file: {file_path.name}")
                return FileOutcome(input_path=file_path, state=FileState.SKIPPED, output_path=output_path)

            self._ensure_parsed(progress, context)
            progress.state = FileState.STEPPING
            context.logger.info(f"Processing file: {file_path.name} with step: {step.name}")
            progress.content = self.execute_step(step, progress.content, context)

        self._ensure_parsed(progress, context)
        progress.state = FileState.FORMATTING
        data = format_content(progress.content, output_path.suffix, context.custom_config, context.logger)
        try:
            output_path.write_bytes(data)
        except OSError as e:
            raise WriteError(str(output_path), str(e)) from e

        progress.state = FileState.WRITTEN
        context.logger.success(f"Successfully processed {file_path.name}")
        return FileOutcome(input_path=file_path, state=FileState.WRITTEN, output_path=output_path)

    def _ensure_parsed(self, progress: _FileProgress, context: RunContext) -> None:
        if progress.parsed:
            return
        progress.state = FileState.PARSING
        progress.content = parse_content(progress.input_path, context.custom_config, context.logger)
        progress.parsed = True

    def execute_step(self, step: WorkflowStep, content: Any, context: RunContext) -> Any:
        """Run a single step on ``content`` and return the new content.

        Raises:
            UnknownStepTypeError: If the step type is not supported
            UnknownBuiltinFunctionError: If a built-in step names no function
            ExecutionError: If a transform script fails
        """
        try:
            step_type = StepType(step.type)
        except ValueError:
            raise UnknownStepTypeError(step.type) from None

        if step_type == StepType.TRANSFORM:
            script_path = resolve_workflow_path(step.function, context.workflow_dir)
            options = {**context.custom_config.options.transform, **step.options}
            return self._sandbox.execute(
                script_path,
                content,
                options,
                timeout=context.timeout,
                cwd=context.workflow_dir,
            )

        if step_type == StepType.BUILT_IN:
            try:
                return apply_builtin(step.function, content, step.options)
            except StepError:
                raise
            except (TypeError, ValueError, AttributeError) as e:
                raise StepError(f"Built-in function '{step.function}' failed: {e}") from e

        # Filter steps pass content through unchanged
        return content

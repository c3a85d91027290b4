"""Out-of-process execution of user transform scripts.

Each call gets a private temporary workspace holding the JSON payloads and
a generated harness. The harness is run with the current interpreter in its
own process group. File descriptor 1 carries nothing but the JSON result:
what the user script writes through sys.stdout or sys.stderr is moved to
stderr behind LOG_TAG and re-emitted as log lines, and raw writes to fd 1
(child processes, C extensions) land on stderr untagged.
"""

import json
import os
import shutil
import signal
import subprocess
import sys
import tempfile
import time
from pathlib import Path
from typing import Any

from transforma.engine.entrypoints import select_entry_point
from transforma.engine.protocols import ScriptSandbox
from transforma.exceptions import (
    NoTransformFunctionFoundError,
    ResultParseError,
    ScriptExecutionError,
    ScriptNotFoundError,
    ScriptTimeoutError,
)
from transforma.logger import RunLogger
from transforma.scaffold.template_render import render_sandbox_template

LOG_TAG = "[transforma:log] "

# Exit code the harness uses when the selected entry point is not callable
EXIT_NO_ENTRY_POINT = 3
NO_ENTRY_POINT_MESSAGE = "No callable transform entry point"

HARNESS_FILENAME = "harness.py"
CONTENT_FILENAME = "content.json"
OPTIONS_FILENAME = "options.json"

# Seconds to wait for the pipes to close once the process group is killed
KILL_DRAIN_SECONDS = 5.0


def _kill_process_group(process: subprocess.Popen) -> None:
    """SIGKILL the harness and every process it started."""
    if os.name != "posix":
        process.kill()
        return
    try:
        os.killpg(process.pid, signal.SIGKILL)
    except ProcessLookupError:
        # Group already gone; reap the harness itself
        process.kill()


def split_diagnostics(stderr: str) -> tuple[list[str], list[str]]:
    """Split stderr into (tagged log lines, other diagnostic lines)."""
    logs: list[str] = []
    other: list[str] = []
    for line in stderr.splitlines():
        if line.startswith(LOG_TAG):
            logs.append(line[len(LOG_TAG):])
        else:
            other.append(line)
    return logs, other


class SubprocessSandbox(ScriptSandbox):
    """Run transform scripts in a child Python process.

    One call blocks until the child exits, both pipes are drained and the
    workspace is removed.
    """

    def __init__(self, logger: RunLogger, python_executable: str | None = None) -> None:
        """Initialize sandbox.

        Args:
            logger: Receives the script's own output lines
            python_executable: Interpreter for the harness (defaults to sys.executable)
        """
        self._logger = logger
        self._python = python_executable or sys.executable

    def execute(
        self,
        script_path: Path,
        content: Any,
        options: dict[str, Any],
        timeout: float | None = None,
        cwd: Path | None = None,
    ) -> Any:
        """Run a transform script on ``content`` and return its result.

        Raises:
            ScriptNotFoundError: If the script does not exist
            NoTransformFunctionFoundError: If no entry point resolves
            ScriptExecutionError: If the harness exits non-zero
            ResultParseError: If the result is not valid JSON
            ScriptTimeoutError: If ``timeout`` seconds elapse first
        """
        script_path = Path(script_path).resolve()
        if not script_path.is_file():
            raise ScriptNotFoundError(str(script_path))

        strategy = select_entry_point(script_path)
        self._logger.debug(f"Using '{strategy.name}' entry point of {script_path.name}")

        workspace = Path(tempfile.mkdtemp(prefix=f"transforma-{time.time_ns()}-"))
        try:
            harness_path = self._prepare_workspace(
                workspace, script_path, strategy.attribute, strategy.name, content, options
            )
            return self._run_harness(harness_path, script_path, timeout, cwd)
        finally:
            shutil.rmtree(workspace, ignore_errors=True)

    def _prepare_workspace(
        self,
        workspace: Path,
        script_path: Path,
        entry_attribute: str | None,
        entry_name: str,
        content: Any,
        options: dict[str, Any],
    ) -> Path:
        content_path = workspace / CONTENT_FILENAME
        options_path = workspace / OPTIONS_FILENAME
        try:
            content_path.write_text(json.dumps(content), encoding="utf-8")
            options_path.write_text(json.dumps(options), encoding="utf-8")
        except (TypeError, ValueError) as e:
            raise ScriptExecutionError(
                str(script_path), None, f"payload is not JSON-serializable: {e}"
            ) from e

        harness_path = workspace / HARNESS_FILENAME
        harness_path.write_text(
            render_sandbox_template(
                "harness.py.j2",
                script_path=repr(str(script_path)),
                content_path=repr(str(content_path)),
                options_path=repr(str(options_path)),
                entry_attribute=repr(entry_attribute),
                entry_name=repr(entry_name),
                log_tag=repr(LOG_TAG),
                exit_no_entry_point=EXIT_NO_ENTRY_POINT,
                no_entry_point_message=repr(NO_ENTRY_POINT_MESSAGE),
            ),
            encoding="utf-8",
        )
        return harness_path

    def _run_harness(
        self,
        harness_path: Path,
        script_path: Path,
        timeout: float | None,
        cwd: Path | None,
    ) -> Any:
        process = subprocess.Popen(
            [self._python, str(harness_path)],
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            encoding="utf-8",
            errors="replace",
            cwd=cwd,
            env={**os.environ, "PYTHONIOENCODING": "utf-8"},
            # Own process group, so a timeout also takes down anything the script spawned
            start_new_session=True,
        )
        try:
            stdout, stderr = process.communicate(timeout=timeout)
        except subprocess.TimeoutExpired:
            _kill_process_group(process)
            try:
                _, stderr = process.communicate(timeout=KILL_DRAIN_SECONDS)
            except subprocess.TimeoutExpired:
                self._logger.debug(f"[{script_path.name}] output not drained after kill")
                stderr = ""
            self._emit_logs(script_path, stderr or "", failed=True)
            raise ScriptTimeoutError(str(script_path), timeout or 0.0) from None

        failed = process.returncode != 0
        details = self._emit_logs(script_path, stderr or "", failed=failed)

        if process.returncode == EXIT_NO_ENTRY_POINT and any(
            line.startswith(NO_ENTRY_POINT_MESSAGE) for line in details
        ):
            raise NoTransformFunctionFoundError(str(script_path))
        if failed:
            raise ScriptExecutionError(str(script_path), process.returncode, "\n".join(details))

        try:
            return json.loads(stdout)
        except json.JSONDecodeError:
            raise ResultParseError(str(script_path), stdout) from None

    def _emit_logs(self, script_path: Path, stderr: str, failed: bool) -> list[str]:
        """Re-emit tagged lines as info logs; return the untagged ones.

        Untagged lines of a successful run are only logged at debug level.
        """
        logs, other = split_diagnostics(stderr)
        for line in logs:
            self._logger.info(f"[{script_path.name}] {line}")
        if not failed:
            for line in other:
                self._logger.debug(f"[{script_path.name}] {line}")
        return other

"""transforma exception hierarchy.

Provides a unified exception hierarchy for the CLI and the engine.
This enables:
- User-friendly error messages in the CLI
- Programmatic error handling in library usage
- Clear distinction between per-file failures and run-level failures

Usage:
    from transforma.exceptions import ConfigNotFoundError, ScriptExecutionError

    try:
        runner.run(Path("workflow.json"))
    except ConfigNotFoundError as e:
        print(f"Config not found: {e.path}")
    except WorkflowAbortedError as e:
        print(f"Aborted on {e.file_name}: {e.cause}")
    except TransformaError as e:
        print(f"transforma error: {e}")
"""


class TransformaError(Exception):
    """Base exception for all transforma errors.

    All transforma-specific exceptions inherit from this class, allowing
    callers to catch all of them with a single except clause.
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


# Configuration Errors


class ConfigurationError(TransformaError):
    """Error in a workflow or custom configuration."""

    pass


class ConfigNotFoundError(ConfigurationError):
    """Workflow configuration file does not exist."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Configuration file not found: {path}")


class ConfigParseError(ConfigurationError):
    """Workflow configuration is malformed.

    Raised when the file is not valid JSON/YAML or does not match
    the workflow schema.
    """

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid workflow configuration '{path}': {reason}")


# Content Errors


class ContentError(TransformaError):
    """Base class for content parsing, formatting and writing errors."""

    pass


class ContentParseError(ContentError):
    """File content is malformed for its extension."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to parse {path}: {reason}")


class CustomParserError(ContentError):
    """A custom parser from wfconfig.py raised.

    Recovered locally: the codec logs it and falls back to the default parser.
    """

    def __init__(self, extension: str, reason: str) -> None:
        self.extension = extension
        self.reason = reason
        super().__init__(f"Custom parser for '{extension}' failed: {reason}")


class CustomFormatterError(ContentError):
    """A custom formatter from wfconfig.py raised or returned a non-string.

    Recovered locally: the codec logs it and falls back to default formatting.
    """

    def __init__(self, format_name: str, reason: str) -> None:
        self.format_name = format_name
        self.reason = reason
        super().__init__(f"Custom formatter '{format_name}' failed: {reason}")


class ContentFormatError(ContentError):
    """The final content value cannot be serialized for output."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Failed to format content: {reason}")


class WriteError(ContentError):
    """Output could not be written."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to write {path}: {reason}")


# Step Errors


class StepError(TransformaError):
    """Base class for step resolution and built-in step errors."""

    pass


class UnknownStepTypeError(StepError):
    """Step declares a type other than transform, built-in or filter."""

    def __init__(self, step_type: str) -> None:
        self.step_type = step_type
        super().__init__(f"Unsupported step type: {step_type}")


class UnknownBuiltinFunctionError(StepError):
    """Built-in step names a function that is not registered."""

    def __init__(self, function_name: str) -> None:
        self.function_name = function_name
        super().__init__(f"Unknown built-in function: {function_name}")


# Execution Errors


class ExecutionError(TransformaError):
    """Base class for sandboxed script execution errors."""

    pass


class ScriptNotFoundError(ExecutionError):
    """Transform script does not exist."""

    def __init__(self, script_path: str) -> None:
        self.script_path = script_path
        super().__init__(f"Script not found: {script_path}")


class NoTransformFunctionFoundError(ExecutionError):
    """No entry point convention matched the script."""

    def __init__(self, script_path: str, tried: list[str] | None = None) -> None:
        self.script_path = script_path
        self.tried = tried or []
        message = f"No transform function found in {script_path}"
        if self.tried:
            message += f" (tried: {', '.join(self.tried)})"
        super().__init__(message)


class ScriptExecutionError(ExecutionError):
    """Script process failed.

    Raised when the harness exits with a non-zero code or the script
    cannot be prepared for execution. ``stderr`` holds the diagnostic
    channel without log-tagged lines.
    """

    def __init__(self, script_path: str, exit_code: int | None, stderr: str = "") -> None:
        self.script_path = script_path
        self.exit_code = exit_code
        self.stderr = stderr
        if exit_code is None:
            message = f"Script '{script_path}' could not be executed"
        else:
            message = f"Script '{script_path}' failed with exit code {exit_code}"
        if stderr:
            message += f": {stderr.strip()[-500:]}"
        super().__init__(message)


class ResultParseError(ExecutionError):
    """Script succeeded but its primary channel was not valid JSON."""

    def __init__(self, script_path: str, output: str) -> None:
        self.script_path = script_path
        self.output = output
        preview = output.strip()[:200] or "<empty>"
        super().__init__(f"Script '{script_path}' returned invalid JSON: {preview}")


class ScriptTimeoutError(ExecutionError):
    """Script exceeded its deadline and was terminated."""

    def __init__(self, script_path: str, timeout_seconds: float) -> None:
        self.script_path = script_path
        self.timeout_seconds = timeout_seconds
        super().__init__(f"Script '{script_path}' timed out after {timeout_seconds}s")


# Run Errors


class WorkflowAbortedError(TransformaError):
    """Run stopped because a file failed and errors are not tolerated."""

    def __init__(self, file_name: str, cause: TransformaError) -> None:
        self.file_name = file_name
        self.cause = cause
        super().__init__(f"Workflow aborted while processing {file_name}: {cause}")

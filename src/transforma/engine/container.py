"""Wiring of the default sandbox and logger.

SubprocessSandbox and RichConsoleLogger are bound to their protocols here
and nowhere else.

Usage:
    runner = Container.workflow_runner(timeout=30)

    # In tests
    Container.set_sandbox(MockSandbox())
    Container.set_logger(ListLogger())
    runner = Container.workflow_runner()

    # Back to the defaults
    Container.reset()
"""

from transforma.engine.protocols import ScriptSandbox
from transforma.engine.runner import WorkflowRunner
from transforma.engine.sandbox import SubprocessSandbox
from transforma.logger import RichConsoleLogger, RunLogger


class Container:
    """Lazily built engine dependencies, overridable per test."""

    _sandbox: ScriptSandbox | None = None
    _logger: RunLogger | None = None

    @classmethod
    def logger(cls) -> RunLogger:
        """Get the run logger.

        Returns RichConsoleLogger by default.
        """
        if cls._logger is None:
            cls._logger = RichConsoleLogger()
        return cls._logger

    @classmethod
    def sandbox(cls) -> ScriptSandbox:
        """Get the script sandbox.

        Returns SubprocessSandbox bound to the current logger by default.
        """
        if cls._sandbox is None:
            cls._sandbox = SubprocessSandbox(logger=cls.logger())
        return cls._sandbox

    @classmethod
    def workflow_runner(cls, timeout: float | None = None) -> WorkflowRunner:
        """Build a WorkflowRunner from the current sandbox and logger."""
        return WorkflowRunner(
            sandbox=cls.sandbox(),
            logger=cls.logger(),
            timeout=timeout,
        )

    @classmethod
    def set_sandbox(cls, sandbox: ScriptSandbox | None) -> None:
        """Override the script sandbox.

        Pass None to reset to default on next access.
        """
        cls._sandbox = sandbox

    @classmethod
    def set_logger(cls, logger: RunLogger | None) -> None:
        """Override the run logger.

        The default sandbox is rebuilt so it logs to the new logger.
        """
        cls._logger = logger
        if isinstance(cls._sandbox, SubprocessSandbox):
            cls._sandbox = None

    @classmethod
    def reset(cls) -> None:
        """Drop every override; defaults are rebuilt on next access."""
        cls._sandbox = None
        cls._logger = None

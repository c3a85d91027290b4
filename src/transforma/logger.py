"""Logger protocol for run output.

Every engine component receives a RunLogger explicitly (through the
RunContext or its constructor) instead of reaching for a global, so tests
can capture output without touching the console or the file system.
"""

import logging
from pathlib import Path
from typing import Protocol, runtime_checkable

from rich.console import Console
from rich.markup import escape

LOGGER_NAME = "transforma"

LOG_FILE_FORMAT = "[%(levelname)s] %(asctime)s: %(message)s"


@runtime_checkable
class RunLogger(Protocol):
    """Protocol for leveled run logging."""

    def debug(self, message: str) -> None: ...

    def info(self, message: str) -> None: ...

    def success(self, message: str) -> None: ...

    def warning(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...


class RichConsoleLogger:
    """Default logger: Rich console output mirrored to stdlib logging.

    Mirroring to ``logging.getLogger("transforma")`` lets the CLI attach a
    log file handler without the engine knowing about it.
    """

    def __init__(self, console: Console | None = None, verbose: bool = False) -> None:
        self._console = console or Console()
        self._verbose = verbose
        self._logger = logging.getLogger(LOGGER_NAME)

    def debug(self, message: str) -> None:
        self._logger.debug(message)
        if self._verbose:
            self._console.print(f"[dim]DEBUG:[/] [dim]{escape(message)}[/]")

    def info(self, message: str) -> None:
        self._logger.info(message)
        self._console.print(f"[bold blue]INFO:[/] {escape(message)}")

    def success(self, message: str) -> None:
        self._logger.info(message)
        self._console.print(f"[bold green]SUCCESS:[/] {escape(message)}")

    def warning(self, message: str) -> None:
        self._logger.warning(message)
        self._console.print(f"[bold yellow]WARNING:[/] {escape(message)}")

    def error(self, message: str) -> None:
        self._logger.error(message)
        self._console.print(f"[bold red]ERROR:[/] {escape(message)}")


class NullLogger:
    """Silent logger for batch execution."""

    def debug(self, message: str) -> None:
        pass

    def info(self, message: str) -> None:
        pass

    def success(self, message: str) -> None:
        pass

    def warning(self, message: str) -> None:
        pass

    def error(self, message: str) -> None:
        pass


class ListLogger:
    """Logger that captures (level, message) pairs for testing."""

    def __init__(self) -> None:
        self.records: list[tuple[str, str]] = []

    def debug(self, message: str) -> None:
        self.records.append(("debug", message))

    def info(self, message: str) -> None:
        self.records.append(("info", message))

    def success(self, message: str) -> None:
        self.records.append(("success", message))

    def warning(self, message: str) -> None:
        self.records.append(("warning", message))

    def error(self, message: str) -> None:
        self.records.append(("error", message))

    def messages(self, level: str | None = None) -> list[str]:
        """Return recorded messages, optionally filtered by level."""
        return [msg for lvl, msg in self.records if level is None or lvl == level]


def attach_log_file(path: Path) -> logging.Handler:
    """Send every transforma log line to ``path`` as well.

    Returns the handler so the caller can detach it with detach_log_file().
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setFormatter(logging.Formatter(LOG_FILE_FORMAT))
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG)
    logger.addHandler(handler)
    return handler


def detach_log_file(handler: logging.Handler) -> None:
    logging.getLogger(LOGGER_NAME).removeHandler(handler)
    handler.close()


# Verify protocol compliance at import time
assert isinstance(NullLogger(), RunLogger)
assert isinstance(ListLogger(), RunLogger)

"""Mock implementations for testing the engine layer.

Provides in-memory implementations of engine protocols that can be
used in tests without subprocess side effects.
"""

from pathlib import Path
from typing import Any, Callable

from transforma.engine.protocols import ScriptSandbox


class MockSandbox:
    """Mock script sandbox for testing.

    Records all calls without launching any process. By default the
    content is returned unchanged; pass ``handler`` to compute a result
    from ``(content, options)`` or ``error`` to raise on every call.
    """

    def __init__(
        self,
        handler: Callable[[Any, dict[str, Any]], Any] | None = None,
        error: Exception | None = None,
    ) -> None:
        self.handler = handler
        self.error = error
        self.calls: list[dict[str, Any]] = []

    def execute(
        self,
        script_path: Path,
        content: Any,
        options: dict[str, Any],
        timeout: float | None = None,
        cwd: Path | None = None,
    ) -> Any:
        """Record the call and return the configured result."""
        self.calls.append({
            "script_path": script_path,
            "content": content,
            "options": options,
            "timeout": timeout,
            "cwd": cwd,
        })
        if self.error is not None:
            raise self.error
        if self.handler is not None:
            return self.handler(content, options)
        return content

    def reset(self) -> None:
        """Clear all recorded calls."""
        self.calls.clear()


# Verify protocol compliance at import time
assert isinstance(MockSandbox(), ScriptSandbox)

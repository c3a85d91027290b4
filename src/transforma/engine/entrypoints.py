"""Entry point selection for user transform scripts.

A script may expose its transform function under several conventions.
Instead of trying each one at import time, the script is parsed once with
``ast`` and the first matching strategy is chosen up front; the sandbox
harness then only has to fetch that one entry point. Adding a convention
means appending an EntryPointStrategy to ENTRY_POINT_STRATEGIES.
"""

import ast
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable

from transforma.exceptions import NoTransformFunctionFoundError, ScriptExecutionError


@dataclass(frozen=True)
class EntryPointStrategy:
    """One way of locating the transform callable in a script.

    Attributes:
        name: Convention name, used in diagnostics
        attribute: Module attribute holding the callable, or None when the
            module object itself is the callable
        predicate: Static check on the parsed script
    """

    name: str
    attribute: str | None
    predicate: Callable[[ast.Module], bool]


def _bound_names(statements: Iterable[ast.stmt]) -> set[str]:
    """Names bound at module level, including inside top-level if/try/with."""
    names: set[str] = set()
    for node in statements:
        if isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef, ast.ClassDef)):
            names.add(node.name)
        elif isinstance(node, ast.Assign):
            for target in node.targets:
                names.update(_target_names(target))
        elif isinstance(node, (ast.AnnAssign, ast.AugAssign)) and isinstance(node.target, ast.Name):
            names.add(node.target.id)
        elif isinstance(node, (ast.Import, ast.ImportFrom)):
            for alias in node.names:
                names.add(alias.asname or alias.name.split(".")[0])
        elif isinstance(node, ast.If):
            names |= _bound_names(node.body) | _bound_names(node.orelse)
        elif isinstance(node, ast.Try):
            names |= _bound_names(node.body) | _bound_names(node.orelse) | _bound_names(node.finalbody)
            for handler in node.handlers:
                names |= _bound_names(handler.body)
        elif isinstance(node, ast.With):
            names |= _bound_names(node.body)
    return names


def _target_names(target: ast.expr) -> set[str]:
    if isinstance(target, ast.Name):
        return {target.id}
    if isinstance(target, (ast.Tuple, ast.List)):
        names: set[str] = set()
        for element in target.elts:
            names |= _target_names(element)
        return names
    return set()


def defines(name: str) -> Callable[[ast.Module], bool]:
    """Predicate: the script binds ``name`` at module level."""

    def predicate(tree: ast.Module) -> bool:
        return name in _bound_names(tree.body)

    return predicate


def replaces_own_module(tree: ast.Module) -> bool:
    """Predicate: the script assigns ``sys.modules[__name__] = ...``."""
    for node in ast.walk(tree):
        if not isinstance(node, ast.Assign):
            continue
        for target in node.targets:
            if (
                isinstance(target, ast.Subscript)
                and isinstance(target.value, ast.Attribute)
                and target.value.attr == "modules"
                and isinstance(target.slice, ast.Name)
                and target.slice.id == "__name__"
            ):
                return True
    return False


ENTRY_POINT_STRATEGIES: tuple[EntryPointStrategy, ...] = (
    EntryPointStrategy("default", "default", defines("default")),
    EntryPointStrategy("transform", "transform", defines("transform")),
    EntryPointStrategy("step1", "step1", defines("step1")),
    EntryPointStrategy("module", None, replaces_own_module),
)


def select_entry_point(
    script_path: Path,
    strategies: Iterable[EntryPointStrategy] = ENTRY_POINT_STRATEGIES,
) -> EntryPointStrategy:
    """Pick the entry point convention of a script without running it.

    Raises:
        ScriptExecutionError: If the script cannot be read or parsed
        NoTransformFunctionFoundError: If no strategy matches
    """
    try:
        tree = ast.parse(script_path.read_text(encoding="utf-8"), filename=str(script_path))
    except (OSError, UnicodeDecodeError, SyntaxError) as e:
        raise ScriptExecutionError(str(script_path), None, f"cannot load script: {e}") from e

    strategies = tuple(strategies)
    for strategy in strategies:
        if strategy.predicate(tree):
            return strategy

    raise NoTransformFunctionFoundError(str(script_path), [s.name for s in strategies])

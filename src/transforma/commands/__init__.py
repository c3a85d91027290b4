"""transforma CLI commands.

Each command module contains the business logic for a CLI command.
The cli.py module handles Typer options and argument parsing,
then delegates to these command functions.
"""

from transforma.commands.create import create_command
from transforma.commands.run import run_command

__all__ = [
    "create_command",
    "run_command",
]

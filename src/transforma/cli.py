"""transforma CLI - Main entry point.

Commands:
- run: Execute a workflow over its input directory
- create: Scaffold a new workflow
"""

from pathlib import Path
from typing import Annotated, Optional

import typer

from transforma import __version__
from transforma.commands import create_command, run_command

app = typer.Typer(
    help="transforma - Transform files with simple Python scripts.\n\n"
    "Create and run local data processing workflows.",
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"transforma {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-v",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = False,
) -> None:
    """transforma - Transform files with simple Python scripts."""
    pass


@app.command()
def run(
    config: Annotated[
        Path,
        typer.Option("--config", "-c", help="Path to the workflow configuration file"),
    ] = Path("workflow.json"),
    force: Annotated[
        bool,
        typer.Option(
            "--force",
            "-f",
            help="Reprocess files with existing outputs and keep going after per-file errors",
        ),
    ] = False,
    reprocess: Annotated[
        bool, typer.Option("--reprocess", help="Ignore skip_existing, reprocess every file")
    ] = False,
    keep_going: Annotated[
        bool, typer.Option("--keep-going", help="Log per-file errors and continue with the next file")
    ] = False,
    timeout: Annotated[
        Optional[float],
        typer.Option(
            "--timeout",
            envvar="TRANSFORMA_SCRIPT_TIMEOUT",
            min=0.0,
            help="Seconds each transform script may run before it is killed",
        ),
    ] = None,
    log_file: Annotated[
        Optional[Path], typer.Option("--log-file", help="Also append log lines to this file")
    ] = None,
    verbose: Annotated[
        bool, typer.Option("--verbose", help="Show debug output, including script stderr")
    ] = False,
) -> None:
    """Run a workflow.

    Examples:
        transforma run --config my-workflow/workflow.json
        transforma run -c workflow.json --force        # Reprocess everything, never abort
        transforma run -c workflow.json --keep-going   # Skip done files, tolerate failures
    """
    run_command(config, force, reprocess, keep_going, timeout, log_file, verbose)


@app.command()
def create(
    name: Annotated[str, typer.Argument(help="Workflow name (e.g., invoices, reddit-progress)")],
    directory: Annotated[
        Optional[Path],
        typer.Option("--dir", "-d", help="Target directory (defaults to ./<name>)"),
    ] = None,
) -> None:
    """Create a new workflow.

    Examples:
        transforma create my-workflow
        transforma create invoices --dir ./workflows/invoices
    """
    create_command(name, directory)


if __name__ == "__main__":
    app()

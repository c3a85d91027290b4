"""Rich display utilities for the transforma CLI."""

from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from transforma.engine.protocols import FileState, RunResult

console = Console()

STATE_STYLES = {
    FileState.WRITTEN: "green",
    FileState.SKIPPED: "yellow",
    FileState.FAILED: "red",
}


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[bold green]✓[/] {message}")


def print_error(message: str) -> None:
    """Print an error message."""
    console.print(f"[bold red]✗[/] {message}")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[bold blue]ℹ[/] {message}")


def print_run_summary(result: RunResult) -> None:
    """Print a table of per-file outcomes followed by the totals."""
    if result.files:
        table = Table(title=f"Workflow: {escape(result.workflow)}")
        table.add_column("File", style="cyan")
        table.add_column("Status")
        table.add_column("Output")
        table.add_column("Error", overflow="fold")

        for outcome in result.files:
            style = STATE_STYLES.get(outcome.state, "dim")
            table.add_row(
                escape(outcome.input_path.name),
                f"[{style}]{outcome.state.value}[/]",
                escape(str(outcome.output_path or "-")),
                escape(outcome.error or ""),
            )
        console.print(table)

    console.print(
        f"[bold]{result.processed_count}[/] processed, "
        f"[bold]{result.skipped_count}[/] skipped, "
        f"[bold]{result.failed_count}[/] failed "
        f"[dim]({result.duration_seconds:.2f}s)[/]"
    )


def print_workflow_created(config_path: Path, name: str) -> None:
    """Print workflow creation success."""
    workflow_dir = config_path.parent
    console.print()
    console.print(
        Panel(
            f"[bold green]Workflow created successfully![/]\n\n"
            f"[bold]Name:[/] {escape(name)}\n"
            f"[bold]Path:[/] {escape(str(workflow_dir))}\n\n"
            f"[dim]Next steps:[/]\n"
            f"  1. Place input files in [cyan]{escape(str(workflow_dir / 'data' / 'input'))}[/]\n"
            f"  2. Edit [cyan]{escape(str(workflow_dir / 'scripts' / 'transform.py'))}[/]\n"
            f"  3. Run [cyan]transforma run --config {escape(str(config_path))}[/]",
            title="[bold]transforma[/]",
            border_style="green",
        )
    )

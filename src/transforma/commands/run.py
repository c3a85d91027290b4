"""Run command implementation."""

from pathlib import Path

from transforma.display import console, print_error, print_info, print_run_summary
from transforma.engine import Container, RunPolicy
from transforma.exceptions import TransformaError
from transforma.logger import RichConsoleLogger, attach_log_file, detach_log_file


def run_command(
    config: Path,
    force: bool,
    reprocess: bool,
    keep_going: bool,
    timeout: float | None,
    log_file: Path | None,
    verbose: bool,
) -> None:
    """Run a workflow.

    This function contains the business logic for the run command.
    ``--force`` turns on both policies; ``--reprocess`` and ``--keep-going``
    turn on one each.
    """
    policy = RunPolicy(
        reprocess_existing=force or reprocess,
        continue_on_error=force or keep_going,
    )

    Container.set_logger(RichConsoleLogger(console=console, verbose=verbose))
    handler = attach_log_file(log_file) if log_file else None
    try:
        print_info(f"Running workflow: {config}")
        console.print()
        runner = Container.workflow_runner(timeout=timeout)
        result = runner.run(config, policy=policy)
    except TransformaError as e:
        print_error(f"Failed to run workflow: {e}")
        raise SystemExit(1) from e
    finally:
        if handler is not None:
            detach_log_file(handler)

    console.print()
    print_run_summary(result)

"""Main CLI application entry point.

Defines the Typer application: a single command that selects remove,
copy or move with ``--mode`` and runs it over ``--file``.
"""

import logging
import time
from pathlib import Path
from typing import Annotated

import typer
from rich.logging import RichHandler

from bulkfs import __version__
from bulkfs.core.config import (
    MAX_WORKERS,
    BulkfsConfig,
    ConfigError,
    load_config,
    save_config,
)
from bulkfs.core.operations import BulkOperator
from bulkfs.models.outcome import OperationReport
from bulkfs.models.request import OperationKind, OperationRequest
from bulkfs.utils.formatting import (
    create_failures_table,
    err_console,
    format_duration,
    print_error,
    print_info,
    print_warning,
)

app = typer.Typer(
    name="bulkfs",
    help="Parallel bulk remove, copy and move for large directory trees.",
    add_completion=False,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"bulkfs version {__version__}")
        raise typer.Exit()


def _configure_logging(verbose: bool) -> None:
    """Route log records through Rich on stderr when verbose."""
    if not verbose:
        return
    logging.basicConfig(
        level=logging.DEBUG,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


@app.command()
def main(
    mode: Annotated[
        str,
        typer.Option("--mode", "-m", help="Operation: rm, cp or mv."),
    ],
    file: Annotated[
        str,
        typer.Option(
            "--file",
            "-f",
            help="File or folder to process (e.g. /media/usb1/example).",
        ),
    ],
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Destination path (required for cp and mv)."),
    ] = None,
    debug: Annotated[
        bool,
        typer.Option("--debug", "-d", help="Print each action before performing it."),
    ] = False,
    bar: Annotated[
        bool | None,
        typer.Option("--bar/--no-bar", "-b", help="Show a progress bar."),
    ] = None,
    workers: Annotated[
        int | None,
        typer.Option(
            "--workers",
            "-w",
            min=1,
            max=MAX_WORKERS,
            help="Worker threads (default: CPU count).",
        ),
    ] = None,
    strict: Annotated[
        bool | None,
        typer.Option(
            "--strict/--no-strict",
            help="Report failed entries and exit with code 1 if any failed.",
        ),
    ] = None,
    save: Annotated[
        bool,
        typer.Option("--save-config", help="Save --workers, --strict and --bar as defaults."),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable debug logging on stderr."),
    ] = False,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
) -> None:
    """Remove, copy or move a file or directory tree in parallel.

    Per-entry failures are skipped silently unless [bold]--strict[/bold]
    is set.
    """
    _configure_logging(verbose)

    if not file.strip():
        raise typer.BadParameter("cannot be empty", param_hint="'--file' / '-f'")

    try:
        config = load_config()
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    effective = BulkfsConfig(
        workers=workers if workers is not None else config.workers,
        strict=strict if strict is not None else config.strict,
        bar=bar if bar is not None else config.bar,
    )

    if save:
        try:
            saved_path = save_config(effective)
        except ConfigError as e:
            print_error(str(e))
            raise typer.Exit(code=1) from e
        print_info(f"Saved defaults to {saved_path}")

    start = time.perf_counter()
    failed = False

    try:
        kind = OperationKind(mode)
    except ValueError:
        typer.echo("Invalid mode")
        kind = None

    if kind is not None:
        if kind.needs_destination and output is None:
            raise typer.BadParameter(
                f"required for mode '{kind.value}'", param_hint="'--output' / '-o'"
            )

        request = OperationRequest(
            source=Path(file),
            kind=kind,
            destination=output if kind.needs_destination else None,
            debug=debug,
            progress=effective.bar,
        )
        operator = BulkOperator(workers=effective.workers, strict=effective.strict)

        try:
            report = operator.run(request)
        except KeyboardInterrupt:
            print_warning("Cancelled; entries not yet started were skipped.")
            raise typer.Exit(code=130) from None

        if effective.strict and not report.success:
            _print_failures(report)
            failed = True

    typer.echo(f"Finished in: {format_duration(time.perf_counter() - start)}")

    if failed:
        raise typer.Exit(code=1)


def _print_failures(report: OperationReport) -> None:
    """Print the failure summary for strict mode."""
    failures = report.failures
    err_console.print(create_failures_table(failures))
    if len(failures) > 20:
        err_console.print(f"[muted](showing 20 of {len(failures)} failures)[/muted]")
    print_error(f"{report.succeeded} succeeded, {report.failed} failed")


if __name__ == "__main__":
    app()

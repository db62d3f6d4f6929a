"""Rich formatting helpers for the Mend CLI.

Rich auto-detects TTY and degrades gracefully when piped (no ANSI codes).
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

if TYPE_CHECKING:
    from mend.batch import BatchReport
    from mend.repair import RepairOutcome
    from mend.target import TargetDescriptor


def get_console() -> Console:
    """Create a Rich Console that auto-detects TTY for graceful pipe degradation."""
    return Console(stderr=False)


def setup_logging(verbosity: int = 0) -> None:
    """Route the ``mend`` logger through Rich on stderr.

    0 shows warnings, 1 (``-v``) adds progress, 2 (``-vv``) adds debug output.
    """
    level = {0: logging.WARNING, 1: logging.INFO}.get(verbosity, logging.DEBUG)
    logger = logging.getLogger("mend")
    logger.setLevel(level)
    if any(isinstance(h, RichHandler) for h in logger.handlers):
        return
    handler = RichHandler(console=Console(stderr=True), show_time=False, show_path=False)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)


def format_descriptor(descriptor: TargetDescriptor, console: Console) -> None:
    """Display the parts of a validated target."""
    table = Table(show_header=False, box=None, pad_edge=False)
    table.add_column("Field", style="bold")
    table.add_column("Value")
    table.add_row("Root", escape(descriptor.root_path))
    table.add_row("File", escape(descriptor.relative_file_path))
    table.add_row("Type", escape(descriptor.owner_type_name))
    table.add_row("Method", escape(descriptor.method_name))
    params = ", ".join(descriptor.parameter_types) or "[dim](none)[/dim]"
    table.add_row("Parameters", params)
    console.print(table)


def format_outcome(outcome: RepairOutcome, console: Console) -> None:
    """Display the result of a single repair."""
    reference = escape(outcome.descriptor.method_reference)
    calls = outcome.result.llm_calls
    if outcome.promoted:
        console.print(
            f"[green]Repaired[/green] {reference} "
            f"after {calls} correction(s); wrote {escape(str(outcome.descriptor.absolute_path))}",
            highlight=False,
        )
    elif outcome.result.is_clean:
        console.print(f"[green]Clean[/green] {reference}: no changes needed", highlight=False)
    else:
        console.print(f"[yellow]Dry run[/yellow] {reference}: original left unchanged", highlight=False)
        if outcome.result.final_diagnostics.report:
            console.print(escape(outcome.result.final_diagnostics.report), highlight=False)


def format_batch_report(report: BatchReport, console: Console) -> None:
    """Display a batch summary table."""
    if report.total == 0:
        console.print("[dim]No targets found.[/dim]")
        return

    table = Table(show_header=True, header_style="bold", box=None, pad_edge=False)
    table.add_column("Status", width=6)
    table.add_column("Method")
    table.add_column("Detail", style="dim")
    for target in report.succeeded:
        table.add_row("[green]ok[/green]", escape(target.method_reference), "")
    for target, error in report.failed:
        table.add_row("[red]fail[/red]", escape(target.method_reference), escape(error))
    console.print(table)
    console.print(
        f"{len(report.succeeded)} succeeded, {len(report.failed)} failed", highlight=False
    )


def format_error(message: str, console: Console) -> None:
    """Display an error message."""
    console.print(f"[red]Error:[/red] {escape(message)}", highlight=False)

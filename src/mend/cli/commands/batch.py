"""mend batch -- repair every public method under a directory."""

from __future__ import annotations

import click

from mend.cli import repair_options
from mend.cli.formatting import format_batch_report, format_error, get_console, setup_logging


@click.command()
@click.argument("directory", type=click.Path(exists=True, file_okay=False))
@click.argument("root", type=click.Path(exists=True, file_okay=False))
@repair_options
def batch(
    directory: str,
    root: str,
    model: str,
    responses: str | None,
    max_iterations: int | None,
    env_file: str | None,
    verbose: int,
) -> None:
    """Repair each public method of each public type in DIRECTORY.

    ROOT is the project root and must contain DIRECTORY.
    """
    from mend.batch import run_batch
    from mend.cli import build_repairer

    setup_logging(verbose)
    console = get_console()
    try:
        _, repairer = build_repairer(model, responses, max_iterations, env_file)
        with repairer:
            report = run_batch(directory, root, repairer.repair)
    except SystemExit:
        raise
    except Exception as e:
        format_error(str(e), console)
        raise SystemExit(1) from None

    format_batch_report(report, console)
    if not report.ok:
        raise SystemExit(1)

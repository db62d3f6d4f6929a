"""mend run -- repair a single method."""

from __future__ import annotations

import click

from mend.cli import repair_options
from mend.cli.formatting import format_error, format_outcome, get_console, setup_logging


@click.command()
@click.argument("root", type=click.Path(exists=True, file_okay=False))
@click.argument("file_path", metavar="FILE")
@click.argument("method")
@repair_options
def run(
    root: str,
    file_path: str,
    method: str,
    model: str,
    responses: str | None,
    max_iterations: int | None,
    env_file: str | None,
    verbose: int,
) -> None:
    """Repair METHOD, declared in FILE relative to ROOT.

    \b
    Example:
        mend run /proj com/example/C.java "com.example.C#testSocket(int)"
    """
    from mend.cli import build_repairer

    setup_logging(verbose)
    console = get_console()
    try:
        _, repairer = build_repairer(model, responses, max_iterations, env_file)
        with repairer:
            outcome = repairer.repair(root, file_path, method)
    except SystemExit:
        raise
    except Exception as e:
        format_error(str(e), console)
        raise SystemExit(1) from None

    format_outcome(outcome, console)

"""mend check -- validate a target without running any tools."""

from __future__ import annotations

import click

from mend.cli.formatting import format_descriptor, format_error, get_console


@click.command()
@click.argument("file_path", metavar="FILE")
@click.argument("method")
@click.option(
    "--root",
    type=click.Path(file_okay=False),
    default=".",
    show_default=True,
    help="Project root the file path is relative to.",
)
def check(file_path: str, method: str, root: str) -> None:
    """Check that FILE and METHOD form a valid target."""
    from mend.target import parse_target

    console = get_console()
    try:
        descriptor = parse_target(root, file_path, method, must_exist=False)
    except Exception as e:
        format_error(str(e), console)
        raise SystemExit(1) from None

    format_descriptor(descriptor, console)

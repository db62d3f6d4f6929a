"""Mend CLI -- terminal interface for automated method repair.

This module is NEVER imported from mend/__init__.py.
It is only loaded via the ``mend`` entry point defined in pyproject.toml.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

try:
    import click
except ImportError:
    raise ImportError(
        "CLI dependencies not installed. Install with: pip install mend[cli]"
    ) from None

from mend.llm.backends import DEFAULT_MODEL, VALID_MODELS

if TYPE_CHECKING:
    from collections.abc import Callable

    from mend.models.config import MendConfig
    from mend.repair import Repairer


def repair_options(func: Callable) -> Callable:
    """Options shared by every command that runs repairs."""
    decorators = [
        click.option(
            "--model",
            type=click.Choice(VALID_MODELS),
            default=DEFAULT_MODEL,
            show_default=True,
            help="Correction model. 'mock' replays --responses, 'dryrun' changes nothing.",
        ),
        click.option(
            "--responses",
            type=click.Path(exists=True, dir_okay=False),
            default=None,
            help="Canned model response for --model mock.",
        ),
        click.option(
            "--max-iterations",
            type=click.IntRange(min=1),
            default=None,
            help="Maximum correction attempts per method.",
        ),
        click.option(
            "--env-file",
            type=click.Path(exists=True, dir_okay=False),
            default=None,
            help="Load MEND_* settings from this file.",
        ),
        click.option("-v", "--verbose", count=True, help="Show progress (-vv for debug)."),
    ]
    for decorator in reversed(decorators):
        func = decorator(func)
    return func


def build_repairer(
    model: str,
    responses: str | None,
    max_iterations: int | None,
    env_file: str | None,
) -> tuple[MendConfig, Repairer]:
    """Load configuration and build a Repairer that logs every transition."""
    from mend.correction import CorrectionConfig, log_event
    from mend.models.config import MendConfig
    from mend.repair import Repairer

    config = MendConfig.from_env(env_file=env_file, max_iterations=max_iterations)
    correction = CorrectionConfig(
        max_iterations=config.max_iterations,
        max_prompt_tokens=config.max_prompt_tokens,
        on_event=log_event,
    )
    return config, Repairer(
        config, model=model, responses_path=responses, correction=correction
    )


@click.group()
@click.version_option(package_name="mend")
def cli() -> None:
    """Mend: repair a Java method until the Checker Framework accepts it."""


# Register subcommands after cli group is defined
from mend.cli.commands.run import run  # noqa: E402
from mend.cli.commands.batch import batch  # noqa: E402
from mend.cli.commands.check import check  # noqa: E402

cli.add_command(run)
cli.add_command(batch)
cli.add_command(check)

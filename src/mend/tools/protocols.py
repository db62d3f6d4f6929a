"""Protocols for the external tools a repair run drives."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol, runtime_checkable

from mend.models.diagnostics import Diagnostics


@runtime_checkable
class Minimizer(Protocol):
    """Extracts the smallest compilable slice of a project around one method."""

    def minimize(
        self, root: str, relative_file_path: str, method_reference: str
    ) -> Path:
        """Return the directory holding the minimized copy.

        The minimized file sits at ``<directory>/<relative_file_path>``.

        Raises:
            MinimizationError: If the tool fails.
        """
        ...


@runtime_checkable
class Verifier(Protocol):
    """Runs a static checker over a single source file."""

    def verify(self, file_path: Path) -> Diagnostics:
        """Return the tagged verification result for ``file_path``."""
        ...

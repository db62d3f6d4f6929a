"""Temporary working copy produced by the minimizer.

The working copy is a directory tree owned by one repair run. It is
removed when the run ends, and at interpreter exit if the run never got
that far.
"""

from __future__ import annotations

import atexit
import logging
import os
import shutil
from collections.abc import Iterable
from pathlib import Path

from mend.exceptions import MinimizationError

logger = logging.getLogger(__name__)


def _overlaps(path: Path, other: Path) -> bool:
    """True if removing ``path`` would also remove ``other``."""
    return path == other or path in other.parents


class WorkingCopy:
    """A minimized project tree and the target file inside it.

    Usage::

        with WorkingCopy(minimized_dir, "com/example/Foo.java") as copy:
            verifier.verify(copy.file_path)
    """

    def __init__(
        self,
        root: str | os.PathLike[str],
        relative_file_path: str,
        *,
        protected: Iterable[str | os.PathLike[str]] = (),
    ) -> None:
        """
        Args:
            root: Directory the minimizer wrote to.
            relative_file_path: Slash-separated target file under ``root``.
            protected: Directories the working copy must never contain,
                such as the project root. The current directory always is.

        Raises:
            MinimizationError: If ``root`` is empty or overlaps a protected
                directory.
        """
        if root is None or os.fspath(root) in ("", "."):
            raise MinimizationError("Minimizer returned an empty output path")
        self.root = Path(root)
        self.relative_file_path = relative_file_path
        self._protected = tuple(Path(p).resolve() for p in protected)
        guarded = self._guarded()
        if guarded is not None:
            raise MinimizationError(
                f"Minimizer output {self.root} contains {guarded}; refusing to use it"
            )
        self._cleaned = False
        atexit.register(self.cleanup)

    def _guarded(self) -> Path | None:
        root = self.root.resolve()
        for path in (Path.cwd().resolve(), *self._protected):
            if _overlaps(root, path):
                return path
        return None

    @property
    def file_path(self) -> Path:
        return self.root.joinpath(*self.relative_file_path.split("/"))

    def exists(self) -> bool:
        """True if the target file is present in the working copy."""
        return self.file_path.is_file()

    def read_text(self) -> str:
        return self.file_path.read_bytes().decode("utf-8")

    def cleanup(self) -> None:
        """Remove the working tree. Safe to call more than once."""
        if self._cleaned:
            return
        self._cleaned = True
        atexit.unregister(self.cleanup)
        guarded = self._guarded()
        if guarded is not None:
            logger.warning("Not removing %s: it contains %s", self.root, guarded)
            return
        shutil.rmtree(self.root, ignore_errors=True)
        logger.debug("Removed working copy %s", self.root)

    def __enter__(self) -> WorkingCopy:
        return self

    def __exit__(self, *args: object) -> None:
        self.cleanup()

    def __repr__(self) -> str:
        return f"WorkingCopy(root={str(self.root)!r}, file={self.relative_file_path!r})"

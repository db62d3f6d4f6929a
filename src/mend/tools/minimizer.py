"""Specimin adapter.

Specimin is a Gradle project that slices a Java program down to what one
target method needs. It runs once per repair, into a fresh temp directory.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
import tempfile
from pathlib import Path

from mend.exceptions import MinimizationError

logger = logging.getLogger(__name__)


class SpeciminMinimizer:
    """Runs ``gradlew run`` inside a Specimin checkout.

    Args:
        specimin_path: Directory of the Specimin checkout.
        tolerate_failure: Log a non-zero exit instead of raising. Set for
            dry runs, where the minimized output is never promoted.
        timeout: Seconds before the Gradle process is killed.
    """

    def __init__(
        self,
        specimin_path: str | os.PathLike[str],
        *,
        tolerate_failure: bool = False,
        timeout: float | None = None,
    ) -> None:
        self._specimin_path = Path(specimin_path)
        self._tolerate_failure = tolerate_failure
        self._timeout = timeout

    def command(self, output_dir: str, root: str, target_file: str, target_method: str) -> list[str]:
        args = (
            f'--outputDirectory "{output_dir}" --root "{root}" '
            f'--targetFile "{target_file}" --targetMethod "{target_method}"'
        )
        return [str(self._specimin_path / "gradlew"), "run", f"--args={args}"]

    def minimize(self, root: str, relative_file_path: str, method_reference: str) -> Path:
        output_dir = tempfile.mkdtemp(prefix="mend-specimin-")
        cmd = self.command(output_dir, root, relative_file_path, method_reference)
        logger.info("Running Specimin: %s", " ".join(cmd))

        try:
            result = subprocess.run(
                cmd,
                cwd=self._specimin_path,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                stdin=subprocess.DEVNULL,
                text=True,
                timeout=self._timeout,
            )
        except (OSError, subprocess.TimeoutExpired) as exc:
            shutil.rmtree(output_dir, ignore_errors=True)
            raise MinimizationError(f"Failed to run Specimin: {exc}") from exc

        for line in (result.stdout or "").splitlines():
            logger.debug("specimin: %s", line)

        if result.returncode != 0:
            if not self._tolerate_failure:
                logger.error("Specimin exited with code %d", result.returncode)
                shutil.rmtree(output_dir, ignore_errors=True)
                raise MinimizationError(
                    f"Specimin exited with code {result.returncode}"
                )
            logger.warning(
                "Specimin exited with code %d; continuing", result.returncode
            )

        logger.info("Minimized output written to %s", output_dir)
        return Path(output_dir)

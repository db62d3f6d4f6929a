"""Checker Framework adapter."""

from __future__ import annotations

import logging
import os
import subprocess
from pathlib import Path

from mend.models.diagnostics import Diagnostics

logger = logging.getLogger(__name__)

ERROR_MARKER = "error:"


def extract_error(output: str) -> str:
    """Text from the first ``error:`` marker onward; empty if there is none."""
    index = output.find(ERROR_MARKER)
    if index == -1:
        return ""
    return output[index:].strip()


class CheckerVerifier:
    """Runs the Checker Framework as a javac wrapper over one file.

    Command: ``java -jar <checker_jar> -cp <classpath> -processor <processors> <file>``.
    The report is whatever javac prints from the first ``error:`` onward.
    Warnings alone count as clean.
    """

    def __init__(
        self,
        checker_jar: str | os.PathLike[str],
        *,
        classpath: str = "",
        processors: str = "resourceleak",
        java: str = "java",
        timeout: float | None = None,
    ) -> None:
        self._checker_jar = os.fspath(checker_jar)
        self._classpath = classpath
        self._processors = processors
        self._java = java
        self._timeout = timeout

    def command(self, file_path: Path) -> list[str]:
        cmd = [self._java, "-jar", self._checker_jar]
        if self._classpath:
            cmd += ["-cp", self._classpath]
        cmd += ["-processor", self._processors, str(file_path)]
        return cmd

    def verify(self, file_path: Path) -> Diagnostics:
        cmd = self.command(file_path)
        logger.info("Checking %s", file_path)
        logger.debug("Running: %s", " ".join(cmd))
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                stdin=subprocess.DEVNULL,
                text=True,
                timeout=self._timeout,
            )
        except (OSError, subprocess.TimeoutExpired) as exc:
            logger.error("Checker Framework could not run on %s: %s", file_path, exc)
            return Diagnostics.tool_error(str(exc))

        report = extract_error(result.stderr or "")
        if not report:
            if result.returncode != 0:
                logger.warning(
                    "Checker exited with code %d without reporting errors",
                    result.returncode,
                )
            return Diagnostics.clean()
        logger.info("Checker Framework reported errors for %s", file_path)
        return Diagnostics.findings(report)

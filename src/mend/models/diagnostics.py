"""Verification results.

A verifier run ends in one of three states: clean, findings (a non-empty
report), or a tool error (the verifier itself could not run). Keeping the
tool error distinct from clean lets the caller choose what it means.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass


class DiagnosticsStatus(str, enum.Enum):
    """Outcome of a single verification."""

    CLEAN = "clean"
    FINDINGS = "findings"
    TOOL_ERROR = "tool_error"


@dataclass(frozen=True)
class Diagnostics:
    """Tagged verification result.

    Attributes:
        status: Which of the three outcomes this is.
        report: The diagnostics text (empty unless FINDINGS).
        cause: Description of the tool failure (empty unless TOOL_ERROR).
    """

    status: DiagnosticsStatus
    report: str = ""
    cause: str = ""

    @classmethod
    def clean(cls) -> Diagnostics:
        return cls(status=DiagnosticsStatus.CLEAN)

    @classmethod
    def findings(cls, report: str) -> Diagnostics:
        """Build a FINDINGS result; a blank report collapses to CLEAN."""
        report = report.strip()
        if not report:
            return cls.clean()
        return cls(status=DiagnosticsStatus.FINDINGS, report=report)

    @classmethod
    def tool_error(cls, cause: str) -> Diagnostics:
        return cls(status=DiagnosticsStatus.TOOL_ERROR, cause=cause)

    @property
    def is_clean(self) -> bool:
        return self.status == DiagnosticsStatus.CLEAN

    @property
    def is_tool_error(self) -> bool:
        return self.status == DiagnosticsStatus.TOOL_ERROR

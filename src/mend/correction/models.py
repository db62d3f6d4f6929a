"""Correction loop states, events and results."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any

from mend.models.diagnostics import Diagnostics


class LoopState(str, enum.Enum):
    """States a repair run passes through."""

    START = "start"
    MINIMIZED = "minimized"
    VERIFYING = "verifying"
    CLEAN = "clean"
    DIAGNOSING = "diagnosing"
    PROMPTING = "prompting"
    EXTRACTING = "extracting"
    SPLICING = "splicing"
    PROMOTING = "promoting"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class StatusEvent:
    """A state transition, reported to the ``on_event`` callback."""

    state: LoopState
    message: str = ""
    payload: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class CorrectionAttempt:
    """One prompt-extract-splice-verify round.

    Attributes:
        iteration: 1-based attempt number.
        diagnostics_before: Report the prompt was built from.
        prompt_tokens: Token count of the prompt (0 when not counted).
        suggestion: Method text extracted from the model response.
        diagnostics_after: Report of the verification after the splice.
    """

    iteration: int
    diagnostics_before: str
    prompt_tokens: int
    suggestion: str
    diagnostics_after: str = ""


@dataclass(frozen=True)
class CorrectionResult:
    """Final result of a correction loop run.

    ``state`` is CLEAN when the working copy verified clean, or DONE when
    a dry run stopped after the first verification.
    """

    state: LoopState
    attempts: tuple[CorrectionAttempt, ...] = ()
    final_diagnostics: Diagnostics = field(default_factory=Diagnostics.clean)

    @property
    def llm_calls(self) -> int:
        return len(self.attempts)

    @property
    def is_clean(self) -> bool:
        return self.state == LoopState.CLEAN

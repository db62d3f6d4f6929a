"""Correction loop configuration."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable

from mend.llm.backends import DEFAULT_MODEL, DRY_RUN_MODEL
from mend.splice.splicer import SplicePolicy

if TYPE_CHECKING:
    from mend.correction.models import StatusEvent


class ToolErrorPolicy(str, enum.Enum):
    """What a verifier that could not run means for the loop.

    - ``FAIL``: stop the run with VerificationToolError.
    - ``CLEAN``: log a warning and treat the file as clean.
    """

    FAIL = "fail"
    CLEAN = "clean"


@dataclass
class CorrectionConfig:
    """Settings for one correction loop run.

    Mutable so callers can adjust settings between runs.

    Attributes:
        max_iterations: Maximum prompt-splice rounds before giving up.
        stop_on_repeat: Give up when a splice leaves the diagnostics
            unchanged.
        tool_error_policy: How to treat a verifier that could not run.
        splice_policy: How a suggestion enters the working copy.
        model: Model selector. The dry-run model stops after the first
            verification.
        max_prompt_tokens: Refuse prompts above this many tokens.
        on_event: Callback invoked on every state transition.
    """

    max_iterations: int = 5
    stop_on_repeat: bool = True
    tool_error_policy: ToolErrorPolicy = ToolErrorPolicy.FAIL
    splice_policy: SplicePolicy = SplicePolicy.IN_PLACE
    model: str = DEFAULT_MODEL
    max_prompt_tokens: int | None = None
    on_event: Callable[[StatusEvent], None] | None = None

    @property
    def dry_run(self) -> bool:
        return self.model == DRY_RUN_MODEL

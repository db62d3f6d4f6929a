"""Correction loop: drives a working copy to a clean verification."""

from mend.correction.callbacks import log_event, notify
from mend.correction.config import CorrectionConfig, ToolErrorPolicy
from mend.correction.loop import CorrectionLoop
from mend.correction.models import (
    CorrectionAttempt,
    CorrectionResult,
    LoopState,
    StatusEvent,
)

__all__ = [
    "CorrectionLoop",
    "CorrectionConfig",
    "ToolErrorPolicy",
    "LoopState",
    "StatusEvent",
    "CorrectionAttempt",
    "CorrectionResult",
    "log_event",
    "notify",
]

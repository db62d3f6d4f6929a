"""Mend: automated repair of a single Java method.

A target method is minimized with Specimin, checked with the Checker
Framework, and corrected by a chat model until the checker is satisfied.
The corrected method is then copied back into the original source file.
"""

__version__ = "0.1.0"

# Entry points
from mend.repair import Repairer, RepairOutcome, RepairSettings, repair
from mend.batch import BatchReport, BatchTarget, iter_targets, run_batch

# Targets
from mend.target import TargetDescriptor, parse_target

# Configuration
from mend.models.config import MendConfig
from mend.models.diagnostics import Diagnostics, DiagnosticsStatus
from mend.correction import (
    CorrectionConfig,
    CorrectionLoop,
    CorrectionResult,
    LoopState,
    StatusEvent,
    ToolErrorPolicy,
)

# Splicing
from mend.splice import SplicePolicy, splice, splice_file
from mend.promotion import promote

# Exceptions
from mend.exceptions import (
    ConfigError,
    EmptySuggestionError,
    MendError,
    MethodNotFoundError,
    MinimizationError,
    ModelSelectionError,
    NonConvergenceError,
    PromotionError,
    PromptTooLargeError,
    SignatureMismatchError,
    SpliceError,
    TargetFormatError,
    TargetNotFoundError,
    VerificationToolError,
)

__all__ = [
    "__version__",
    "repair",
    "Repairer",
    "RepairOutcome",
    "RepairSettings",
    "run_batch",
    "iter_targets",
    "BatchReport",
    "BatchTarget",
    "TargetDescriptor",
    "parse_target",
    "MendConfig",
    "Diagnostics",
    "DiagnosticsStatus",
    "CorrectionConfig",
    "CorrectionLoop",
    "CorrectionResult",
    "LoopState",
    "StatusEvent",
    "ToolErrorPolicy",
    "SplicePolicy",
    "splice",
    "splice_file",
    "promote",
    "MendError",
    "ConfigError",
    "TargetFormatError",
    "TargetNotFoundError",
    "ModelSelectionError",
    "MinimizationError",
    "VerificationToolError",
    "EmptySuggestionError",
    "PromptTooLargeError",
    "SpliceError",
    "MethodNotFoundError",
    "SignatureMismatchError",
    "PromotionError",
    "NonConvergenceError",
]

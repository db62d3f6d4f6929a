"""Mend exception hierarchy.

All Mend-specific exceptions inherit from MendError. Every terminal
failure of a repair run is one of these; none is retried by the core.
"""

from __future__ import annotations


class MendError(Exception):
    """Base exception for all Mend errors."""


class ConfigError(MendError):
    """Raised when configuration is missing or invalid."""


class TargetFormatError(MendError):
    """Raised when a target file path or method reference is malformed.

    Attributes:
        part: Which half of the descriptor failed: ``"file"`` or ``"method"``.
        value: The rejected input.
    """

    def __init__(self, part: str, value: str, reason: str | None = None) -> None:
        self.part = part
        self.value = value
        detail = reason or "does not adhere to the required format"
        super().__init__(f"Formatting error: target {part} '{value}' {detail}.")


class TargetNotFoundError(MendError):
    """Raised when the target file does not exist under the project root."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Target file not found: {path}")


class ModelSelectionError(MendError):
    """Raised when an unknown model selector is requested."""

    def __init__(self, model: str, valid: tuple[str, ...]) -> None:
        self.model = model
        self.valid = valid
        super().__init__(
            f"Invalid model '{model}'. Expected one of: {', '.join(valid)}"
        )


class MinimizationError(MendError):
    """Raised when the minimizer fails or produces no working copy."""


class VerificationToolError(MendError):
    """Raised when the verifier could not be executed.

    Only raised when the run is configured to fail on tool errors; the
    alternative policy demotes the failure to a clean result.
    """

    def __init__(self, path: str, cause: str) -> None:
        self.path = path
        self.cause = cause
        super().__init__(f"Verification tool failed on {path}: {cause}")


class EmptySuggestionError(MendError):
    """Raised when a model response contains no fenced code block."""

    def __init__(self, response: str = "") -> None:
        self.response = response
        super().__init__("Could not extract a code block from the model response.")


class PromptTooLargeError(MendError):
    """Raised when a correction prompt exceeds the configured token budget."""

    def __init__(self, tokens: int, max_tokens: int) -> None:
        self.tokens = tokens
        self.max_tokens = max_tokens
        super().__init__(
            f"Correction prompt is {tokens} tokens (max: {max_tokens})"
        )


class SpliceError(MendError):
    """Raised when a method cannot be parsed or spliced into a file."""


class MethodNotFoundError(SpliceError):
    """Raised when a named method cannot be located in a source file."""

    def __init__(self, method_name: str, where: str = "source") -> None:
        self.method_name = method_name
        super().__init__(f"Method '{method_name}' not found in {where}")


class SignatureMismatchError(SpliceError):
    """Raised when a replacement's signature differs from the original's.

    Attributes:
        expected: Signatures of the same-named methods in the target.
        actual: Signature of the replacement.
    """

    def __init__(self, expected: list[str], actual: str) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Signature mismatch: replacement '{actual}' does not match "
            f"any of: {', '.join(expected)}"
        )


class PromotionError(MendError):
    """Raised when the corrected method cannot be copied into the original file."""


class NonConvergenceError(MendError):
    """Raised when the correction loop stops making progress.

    Attributes:
        iterations: Number of correction attempts made.
        diagnostics: The last diagnostics report.
    """

    def __init__(self, iterations: int, diagnostics: str, reason: str) -> None:
        self.iterations = iterations
        self.diagnostics = diagnostics
        super().__init__(
            f"Correction did not converge after {iterations} attempt(s): {reason}"
        )

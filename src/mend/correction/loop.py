"""Verify, prompt, extract, splice, repeat.

The CorrectionLoop drives one working copy to a clean verification. Each
round builds a prompt from the declaring type and the current diagnostics,
asks the backend for a corrected method, splices the fenced code block
into the working copy and verifies again. The loop is bounded by
``max_iterations`` and stops early when a splice makes no difference to
the diagnostics.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from mend.correction.callbacks import notify
from mend.correction.config import CorrectionConfig, ToolErrorPolicy
from mend.correction.models import CorrectionAttempt, CorrectionResult, LoopState
from mend.exceptions import (
    MendError,
    NonConvergenceError,
    VerificationToolError,
)
from mend.extract import require_code_block
from mend.llm.tokens import NullTokenCounter, measure_prompt
from mend.models.diagnostics import Diagnostics
from mend.prompts.correction import PromptTemplate
from mend.splice import find_declaring_type, splice_file

if TYPE_CHECKING:
    from mend.llm.protocols import CompletionBackend
    from mend.llm.tokens import TokenCounter
    from mend.target import TargetDescriptor
    from mend.tools.protocols import Verifier
    from mend.workspace import WorkingCopy

logger = logging.getLogger(__name__)


class CorrectionLoop:
    """Correction loop over a minimized working copy.

    Usage::

        loop = CorrectionLoop(descriptor, copy, verifier, backend)
        result = loop.run()
        if result.is_clean:
            promote(copy.file_path, descriptor.absolute_path, descriptor)
    """

    def __init__(
        self,
        descriptor: TargetDescriptor,
        working_copy: WorkingCopy,
        verifier: Verifier,
        backend: CompletionBackend,
        config: CorrectionConfig | None = None,
        template: PromptTemplate | None = None,
        token_counter: TokenCounter | None = None,
    ) -> None:
        self._descriptor = descriptor
        self._copy = working_copy
        self._verifier = verifier
        self._backend = backend
        self._config = config or CorrectionConfig()
        self._template = template or PromptTemplate()
        self._counter = token_counter or NullTokenCounter()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def run(self) -> CorrectionResult:
        """Run until the working copy verifies clean.

        Returns:
            CorrectionResult in state CLEAN, or DONE for a dry run that
            found diagnostics.

        Raises:
            VerificationToolError: If the verifier cannot run and the
                tool error policy is FAIL.
            EmptySuggestionError: If a response has no code block.
            SpliceError: If a suggestion cannot be spliced.
            NonConvergenceError: If the iteration limit is reached or a
                splice leaves the diagnostics unchanged.
            PromptTooLargeError: If a prompt exceeds max_prompt_tokens.
            ModelServiceError: If the backend fails.
        """
        try:
            return self._run()
        except MendError as exc:
            self._emit(LoopState.FAILED, str(exc), error=type(exc).__name__)
            raise

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _run(self) -> CorrectionResult:
        config = self._config
        attempts: list[CorrectionAttempt] = []
        diagnostics = self._verify()
        iteration = 0

        while True:
            if diagnostics.is_clean:
                self._emit(LoopState.CLEAN, "Verification is clean", attempts=iteration)
                return CorrectionResult(
                    state=LoopState.CLEAN,
                    attempts=tuple(attempts),
                    final_diagnostics=diagnostics,
                )

            if config.dry_run:
                logger.info("Dry run: skipping correction of %s", self._descriptor.method_reference)
                self._emit(LoopState.DONE, "Dry run: correction skipped")
                return CorrectionResult(
                    state=LoopState.DONE,
                    attempts=tuple(attempts),
                    final_diagnostics=diagnostics,
                )

            if iteration >= config.max_iterations:
                raise NonConvergenceError(
                    iteration, diagnostics.report, "iteration limit reached"
                )
            iteration += 1

            attempt = self._attempt(iteration, diagnostics)
            after = self._verify()
            attempts.append(
                CorrectionAttempt(
                    iteration=iteration,
                    diagnostics_before=diagnostics.report,
                    prompt_tokens=attempt.prompt_tokens,
                    suggestion=attempt.suggestion,
                    diagnostics_after=after.report,
                )
            )

            if (
                config.stop_on_repeat
                and not after.is_clean
                and after.report == diagnostics.report
            ):
                raise NonConvergenceError(
                    iteration, after.report, "diagnostics unchanged after correction"
                )
            diagnostics = after

    def _attempt(self, iteration: int, diagnostics: Diagnostics) -> CorrectionAttempt:
        method_name = self._descriptor.method_name

        self._emit(
            LoopState.DIAGNOSING,
            f"Correction attempt {iteration}",
            iteration=iteration,
            diagnostics=diagnostics.report,
        )
        type_source = find_declaring_type(self._copy.read_text(), method_name)
        prompt = self._template.build(type_source, diagnostics.report)
        tokens = measure_prompt(self._counter, prompt, self._config.max_prompt_tokens)

        self._emit(LoopState.PROMPTING, "Requesting a correction", tokens=tokens)
        response = self._backend.complete(prompt)

        self._emit(LoopState.EXTRACTING)
        suggestion = require_code_block(response)

        self._emit(LoopState.SPLICING, f"Replacing {method_name}", suggestion=suggestion)
        splice_file(
            self._copy.file_path,
            suggestion,
            method_name=method_name,
            policy=self._config.splice_policy,
        )
        return CorrectionAttempt(
            iteration=iteration,
            diagnostics_before=diagnostics.report,
            prompt_tokens=tokens,
            suggestion=suggestion,
        )

    def _verify(self) -> Diagnostics:
        path = self._copy.file_path
        self._emit(LoopState.VERIFYING, str(path))
        diagnostics = self._verifier.verify(path)
        if not diagnostics.is_tool_error:
            return diagnostics

        if self._config.tool_error_policy == ToolErrorPolicy.FAIL:
            raise VerificationToolError(str(path), diagnostics.cause)
        logger.warning(
            "Verifier could not run on %s (%s); treating as clean",
            path, diagnostics.cause,
        )
        return Diagnostics.clean()

    def _emit(self, state: LoopState, message: str = "", **payload: object) -> None:
        notify(self._config.on_event, state, message, **payload)

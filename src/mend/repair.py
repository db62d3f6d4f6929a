"""Repair driver: one target method from descriptor to promoted fix.

``repair()`` takes its collaborators as arguments; ``Repairer`` builds
the real ones (Specimin, the Checker Framework, a model backend) from a
MendConfig.
"""

from __future__ import annotations

import dataclasses
import logging
import os
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from mend.correction import (
    CorrectionConfig,
    CorrectionLoop,
    CorrectionResult,
    LoopState,
    notify,
)
from mend.exceptions import MinimizationError
from mend.llm.backends import DEFAULT_MODEL, resolve_backend, validate_model
from mend.llm.tokens import NullTokenCounter, TiktokenCounter
from mend.models.config import MendConfig
from mend.promotion import promote
from mend.prompts.correction import PromptTemplate
from mend.target import parse_target
from mend.tools import CheckerVerifier, SpeciminMinimizer
from mend.workspace import WorkingCopy

if TYPE_CHECKING:
    from mend.llm.protocols import CompletionBackend
    from mend.llm.tokens import TokenCounter
    from mend.target import TargetDescriptor
    from mend.tools import Minimizer, Verifier

logger = logging.getLogger(__name__)


@dataclass
class RepairSettings:
    """Everything a repair run needs besides its collaborators.

    Attributes:
        model: Model selector; also written into ``correction.model``.
        config: Process-level configuration (prompt text, token limit).
        correction: Correction loop settings.
    """

    model: str = DEFAULT_MODEL
    config: MendConfig = field(default_factory=MendConfig)
    correction: CorrectionConfig = field(default_factory=CorrectionConfig)


@dataclass(frozen=True)
class RepairOutcome:
    """Result of a repair run.

    Attributes:
        descriptor: The validated target.
        result: What the correction loop did.
        promoted: True if the original file was rewritten.
    """

    descriptor: TargetDescriptor
    result: CorrectionResult
    promoted: bool = False


def repair(
    root: str | os.PathLike[str],
    file_path: str,
    method_ref: str,
    *,
    minimizer: Minimizer,
    verifier: Verifier,
    backend: CompletionBackend,
    settings: RepairSettings | None = None,
    token_counter: TokenCounter | None = None,
) -> RepairOutcome:
    """Repair one method.

    Validates the target, minimizes once, runs the correction loop on the
    working copy and promotes the result into the original file. The
    working copy is removed however the run ends. A dry run never writes
    to the original file.

    Raises:
        MendError: Any failure of a step. See mend.exceptions.
    """
    settings = settings or RepairSettings()
    validate_model(settings.model)
    correction = dataclasses.replace(settings.correction, model=settings.model)
    if correction.max_prompt_tokens is None:
        correction.max_prompt_tokens = settings.config.max_prompt_tokens
    on_event = correction.on_event

    descriptor = parse_target(root, file_path, method_ref)
    notify(on_event, LoopState.START, descriptor.method_reference)
    logger.info(
        "Running repair on %s in %s", descriptor.method_reference, descriptor.absolute_path
    )

    output_dir = minimizer.minimize(
        descriptor.root_path, descriptor.relative_file_path, descriptor.method_reference
    )
    copy = WorkingCopy(
        output_dir, descriptor.relative_file_path, protected=(descriptor.root_path,)
    )
    try:
        if not copy.root.is_dir():
            raise MinimizationError(f"Minimizer output {copy.root} is not a directory")
        if not copy.exists():
            if correction.dry_run:
                logger.warning("Dry run: no minimized output for %s", descriptor.method_reference)
                notify(on_event, LoopState.DONE, "Dry run: nothing minimized")
                return RepairOutcome(descriptor=descriptor, result=CorrectionResult(LoopState.DONE))
            if not any(copy.root.iterdir()):
                raise MinimizationError(f"Minimizer produced no output in {copy.root}")
            raise MinimizationError(
                f"Minimized file {descriptor.relative_file_path} missing from {copy.root}"
            )
        notify(on_event, LoopState.MINIMIZED, str(copy.file_path))

        loop = CorrectionLoop(
            descriptor,
            copy,
            verifier,
            backend,
            config=correction,
            template=PromptTemplate(
                prefix=settings.config.prompt_prefix,
                suffix=settings.config.prompt_suffix,
            ),
            token_counter=token_counter,
        )
        result = loop.run()

        promoted = False
        if result.is_clean and not correction.dry_run:
            notify(on_event, LoopState.PROMOTING, str(descriptor.absolute_path))
            promoted = promote(copy.file_path, descriptor.absolute_path, descriptor)

        notify(on_event, LoopState.DONE, descriptor.method_reference, promoted=promoted)
        logger.info(
            "Repair of %s finished after %d model call(s)",
            descriptor.method_reference, result.llm_calls,
        )
        return RepairOutcome(descriptor=descriptor, result=result, promoted=promoted)
    finally:
        copy.cleanup()


class Repairer:
    """Builds the real collaborators from configuration and runs repairs.

    The backend is created on first use and reused across targets, which
    is how batch runs share one HTTP client.

    Usage::

        with Repairer(MendConfig.from_env(), model="gpt-4") as repairer:
            outcome = repairer.repair("/proj", "com/example/C.java", "com.example.C#m()")
    """

    def __init__(
        self,
        config: MendConfig,
        *,
        model: str = DEFAULT_MODEL,
        responses_path: str | os.PathLike[str] | None = None,
        correction: CorrectionConfig | None = None,
    ) -> None:
        self._config = config
        self._model = validate_model(model)
        self._responses_path = responses_path
        base = correction or CorrectionConfig(
            max_iterations=config.max_iterations,
            max_prompt_tokens=config.max_prompt_tokens,
        )
        self._correction = dataclasses.replace(base, model=self._model)
        self._backend: CompletionBackend | None = None
        self._token_counter: TokenCounter | None = None

    @property
    def settings(self) -> RepairSettings:
        return RepairSettings(model=self._model, config=self._config, correction=self._correction)

    def build_minimizer(self) -> SpeciminMinimizer:
        self._config.require("specimin_path")
        return SpeciminMinimizer(
            self._config.specimin_path,
            tolerate_failure=self._correction.dry_run,
        )

    def build_verifier(self) -> CheckerVerifier:
        self._config.require("checker_jar")
        return CheckerVerifier(
            self._config.checker_jar,
            classpath=self._config.checker_classpath,
            processors=self._config.checker_processors,
        )

    def build_token_counter(self) -> TokenCounter:
        # Canned and dry-run backends never see a tokenizer-bound model.
        if self._token_counter is None:
            if self._model == DEFAULT_MODEL:
                self._token_counter = TiktokenCounter(self._config.llm_model)
            else:
                self._token_counter = NullTokenCounter()
        return self._token_counter

    @property
    def backend(self) -> CompletionBackend:
        if self._backend is None:
            self._backend = resolve_backend(
                self._model, self._config, responses_path=self._responses_path
            )
        return self._backend

    def repair(self, root: str | os.PathLike[str], file_path: str, method_ref: str) -> RepairOutcome:
        return repair(
            root,
            file_path,
            method_ref,
            minimizer=self.build_minimizer(),
            verifier=self.build_verifier(),
            backend=self.backend,
            settings=self.settings,
            token_counter=self.build_token_counter(),
        )

    __call__ = repair

    def close(self) -> None:
        close = getattr(self._backend, "close", None)
        if close is not None:
            close()
        self._backend = None

    def __enter__(self) -> Repairer:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

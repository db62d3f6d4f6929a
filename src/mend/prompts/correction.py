"""Correction prompt construction.

The prompt is the declaring type's source, a fixed prefix, the
diagnostics report, and a fixed suffix, one per paragraph.
"""

from __future__ import annotations

from dataclasses import dataclass

from mend.models.config import DEFAULT_PROMPT_PREFIX, DEFAULT_PROMPT_SUFFIX


def build_correction_prompt(
    type_source: str,
    diagnostics: str,
    prefix: str = DEFAULT_PROMPT_PREFIX,
    suffix: str = DEFAULT_PROMPT_SUFFIX,
) -> str:
    """Build the user prompt asking for a corrected method.

    Args:
        type_source: Source of the type declaring the target method.
        diagnostics: The verifier's report.
        prefix: Text placed between the source and the report.
        suffix: Closing instructions.

    Returns:
        The prompt text.
    """
    return "\n".join((type_source.rstrip(), prefix, diagnostics.strip(), suffix))


@dataclass(frozen=True)
class PromptTemplate:
    """Prefix/suffix pair applied to every correction prompt."""

    prefix: str = DEFAULT_PROMPT_PREFIX
    suffix: str = DEFAULT_PROMPT_SUFFIX

    def build(self, type_source: str, diagnostics: str) -> str:
        return build_correction_prompt(
            type_source, diagnostics, prefix=self.prefix, suffix=self.suffix
        )

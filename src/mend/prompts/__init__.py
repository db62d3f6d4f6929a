"""Prompt text for the correction model."""

from mend.prompts.correction import PromptTemplate, build_correction_prompt

__all__ = ["PromptTemplate", "build_correction_prompt"]

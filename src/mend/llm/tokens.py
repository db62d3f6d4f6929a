"""Prompt size accounting.

Correction prompts carry a whole type declaration, so they are measured
before they are sent. ``TiktokenCounter`` measures for the chat model;
``NullTokenCounter`` is used for the canned and dry-run models.
"""

from __future__ import annotations

import functools
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from mend.exceptions import PromptTooLargeError

if TYPE_CHECKING:
    import tiktoken

# Used when tiktoken does not know the configured model name.
FALLBACK_ENCODING = "cl100k_base"


@runtime_checkable
class TokenCounter(Protocol):
    """Counts tokens in prompt text."""

    def count_text(self, text: str) -> int: ...


@functools.lru_cache(maxsize=None)
def _encoding_for(model: str) -> tiktoken.Encoding:
    import tiktoken

    try:
        return tiktoken.encoding_for_model(model)
    except KeyError:
        return tiktoken.get_encoding(FALLBACK_ENCODING)


class TiktokenCounter:
    """Counts tokens the way the chat model's tokenizer does.

    Encodings are loaded once per model name and shared.
    """

    def __init__(self, model: str = "gpt-4") -> None:
        self._encoding = _encoding_for(model)

    @property
    def encoding_name(self) -> str:
        return self._encoding.name

    def count_text(self, text: str) -> int:
        if not text:
            return 0
        return len(self._encoding.encode(text, disallowed_special=()))


class NullTokenCounter:
    """Reports every prompt as empty."""

    def count_text(self, text: str) -> int:
        return 0


def measure_prompt(counter: TokenCounter, prompt: str, limit: int | None) -> int:
    """Count the prompt's tokens and enforce ``limit``.

    Raises:
        PromptTooLargeError: If the count exceeds ``limit``.
    """
    tokens = counter.count_text(prompt)
    if limit is not None and tokens > limit:
        raise PromptTooLargeError(tokens, limit)
    return tokens

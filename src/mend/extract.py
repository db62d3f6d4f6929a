"""Code block extraction from model responses."""

from __future__ import annotations

import logging
import re

from mend.exceptions import EmptySuggestionError

logger = logging.getLogger(__name__)

_UNTAGGED_BLOCK = re.compile(r"```[ \t]*\r?\n(.*?)```", re.DOTALL)


def extract_code_block(response: str, language: str = "java") -> str:
    """Return the first fenced code block tagged with ``language``.

    Falls back to the first untagged fence. Returns an empty string when
    the response holds no fenced block.
    """
    tagged = re.compile(rf"```{re.escape(language)}\b(.*?)```", re.DOTALL)
    for pattern in (tagged, _UNTAGGED_BLOCK):
        match = pattern.search(response)
        if match is not None:
            block = match.group(1).strip()
            if block:
                logger.debug("Extracted code block from response: %s", block)
                return block
    return ""


def require_code_block(response: str, language: str = "java") -> str:
    """Like extract_code_block, but an empty result is an error.

    Raises:
        EmptySuggestionError: If no fenced block is found.
    """
    block = extract_code_block(response, language)
    if not block:
        raise EmptySuggestionError(response)
    return block

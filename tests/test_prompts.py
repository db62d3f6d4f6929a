"""Tests for correction prompt construction."""

from __future__ import annotations

from mend.models.config import DEFAULT_PROMPT_PREFIX, DEFAULT_PROMPT_SUFFIX
from mend.prompts import PromptTemplate, build_correction_prompt


class TestBuildCorrectionPrompt:
    def test_parts_in_order(self):
        prompt = build_correction_prompt("class C {}", "error: bad", "PREFIX", "SUFFIX")
        assert prompt == "class C {}\nPREFIX\nerror: bad\nSUFFIX"

    def test_strips_trailing_whitespace(self):
        prompt = build_correction_prompt("class C {}\n\n", "\nerror: bad\n\n", "P", "S")
        assert prompt == "class C {}\nP\nerror: bad\nS"

    def test_defaults(self):
        prompt = build_correction_prompt("class C {}", "error: bad")
        assert DEFAULT_PROMPT_PREFIX in prompt
        assert prompt.endswith(DEFAULT_PROMPT_SUFFIX)
        assert prompt.index("class C {}") < prompt.index(DEFAULT_PROMPT_PREFIX)
        assert prompt.index(DEFAULT_PROMPT_PREFIX) < prompt.index("error: bad")

    def test_default_suffix_asks_for_java_block(self):
        assert "```java" in DEFAULT_PROMPT_SUFFIX


class TestPromptTemplate:
    def test_build_uses_template_text(self):
        template = PromptTemplate(prefix="Errors:", suffix="Fix it.")
        assert template.build("class C {}", "error: x") == "class C {}\nErrors:\nerror: x\nFix it."

    def test_default_template(self):
        assert PromptTemplate().build("T", "E") == build_correction_prompt("T", "E")

"""Tests for MendConfig loading and validation."""

from __future__ import annotations

import pytest

from mend.exceptions import ConfigError
from mend.models.config import DEFAULT_PROMPT_PREFIX, MendConfig


class TestDefaults:
    def test_defaults(self):
        config = MendConfig()
        assert config.llm_model == "gpt-4"
        assert config.response_timeout == 60.0
        assert config.heartbeat_interval == 10.0
        assert config.max_iterations == 5
        assert config.max_prompt_tokens is None
        assert config.checker_processors == "resourceleak"
        assert config.prompt_prefix == DEFAULT_PROMPT_PREFIX
        assert config.specimin_path is None


class TestFromEnv:
    def test_reads_mend_variables(self):
        config = MendConfig.from_env(environ={
            "MEND_SPECIMIN_PATH": "/opt/specimin",
            "MEND_CHECKER_JAR": "/opt/checker.jar",
            "MEND_RESPONSE_TIMEOUT": "30",
            "MEND_MAX_ITERATIONS": "2",
            "MEND_PROMPT_PREFIX": "Errors:",
            "UNRELATED": "x",
        })
        assert config.specimin_path == "/opt/specimin"
        assert config.checker_jar == "/opt/checker.jar"
        assert config.response_timeout == 30.0
        assert config.max_iterations == 2
        assert config.prompt_prefix == "Errors:"

    def test_empty_values_use_defaults(self):
        config = MendConfig.from_env(environ={"MEND_MAX_ITERATIONS": ""})
        assert config.max_iterations == 5

    def test_overrides_win(self):
        config = MendConfig.from_env(
            environ={"MEND_MAX_ITERATIONS": "2"}, max_iterations=9
        )
        assert config.max_iterations == 9

    def test_none_override_ignored(self):
        config = MendConfig.from_env(
            environ={"MEND_MAX_ITERATIONS": "2"}, max_iterations=None
        )
        assert config.max_iterations == 2

    @pytest.mark.parametrize(
        "var, value",
        [
            ("MEND_RESPONSE_TIMEOUT", "0"),
            ("MEND_RESPONSE_TIMEOUT", "soon"),
            ("MEND_MAX_ITERATIONS", "0"),
            ("MEND_MAX_PROMPT_TOKENS", "-1"),
        ],
    )
    def test_invalid_values(self, var, value):
        with pytest.raises(ConfigError, match="Invalid configuration"):
            MendConfig.from_env(environ={var: value})

    def test_env_file(self, tmp_path, monkeypatch):
        monkeypatch.setenv("MEND_CHECKER_JAR", "placeholder")
        monkeypatch.delenv("MEND_CHECKER_JAR")
        env_file = tmp_path / ".env"
        env_file.write_text("MEND_CHECKER_JAR=/from/dotenv.jar\n", encoding="utf-8")
        config = MendConfig.from_env(env_file=env_file)
        assert config.checker_jar == "/from/dotenv.jar"

    def test_environment_beats_env_file(self, tmp_path, monkeypatch):
        monkeypatch.setenv("MEND_CHECKER_JAR", "/from/env.jar")
        env_file = tmp_path / ".env"
        env_file.write_text("MEND_CHECKER_JAR=/from/dotenv.jar\n", encoding="utf-8")
        config = MendConfig.from_env(env_file=env_file)
        assert config.checker_jar == "/from/env.jar"


class TestRequire:
    def test_present(self):
        MendConfig(specimin_path="/opt/specimin").require("specimin_path")

    def test_missing_lists_env_vars(self):
        with pytest.raises(ConfigError) as exc_info:
            MendConfig().require("specimin_path", "checker_jar")
        message = str(exc_info.value)
        assert "specimin_path" in message and "checker_jar" in message
        assert "MEND_SPECIMIN_PATH" in message and "MEND_CHECKER_JAR" in message

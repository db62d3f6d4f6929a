"""Configuration models for Mend.

MendConfig holds the process-level settings: external tool locations,
prompt text, and LLM connection parameters. It is loaded from ``MEND_*``
environment variables, optionally seeded from a ``.env`` file.
"""

from __future__ import annotations

import logging
import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError

from mend.exceptions import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_SYSTEM_MESSAGE: str = (
    "You are an expert Java developer who fixes errors reported by the "
    "Checker Framework. You change as little code as possible and never "
    "change a method's signature."
)

DEFAULT_PROMPT_PREFIX: str = (
    "The Java code above fails verification with the Checker Framework. "
    "The reported errors are:"
)

DEFAULT_PROMPT_SUFFIX: str = (
    "Rewrite the method so that these errors are fixed. Keep the return type, "
    "name and parameters exactly as they are. Reply with the complete "
    "corrected method, and nothing else, inside a single ```java code block."
)

# Environment variable -> field name.
_ENV_FIELDS: dict[str, str] = {
    "MEND_SPECIMIN_PATH": "specimin_path",
    "MEND_CHECKER_JAR": "checker_jar",
    "MEND_CHECKER_CLASSPATH": "checker_classpath",
    "MEND_CHECKER_PROCESSORS": "checker_processors",
    "MEND_SYSTEM_MESSAGE": "system_message",
    "MEND_PROMPT_PREFIX": "prompt_prefix",
    "MEND_PROMPT_SUFFIX": "prompt_suffix",
    "MEND_OPENAI_API_KEY": "api_key",
    "MEND_OPENAI_BASE_URL": "base_url",
    "MEND_LLM_MODEL": "llm_model",
    "MEND_RESPONSE_TIMEOUT": "response_timeout",
    "MEND_HEARTBEAT_INTERVAL": "heartbeat_interval",
    "MEND_MAX_RETRIES": "max_retries",
    "MEND_MAX_ITERATIONS": "max_iterations",
    "MEND_MAX_PROMPT_TOKENS": "max_prompt_tokens",
}


class MendConfig(BaseModel):
    """Process-level Mend configuration."""

    specimin_path: Optional[str] = None
    checker_jar: Optional[str] = None
    checker_classpath: str = ""
    checker_processors: str = "resourceleak"

    system_message: str = DEFAULT_SYSTEM_MESSAGE
    prompt_prefix: str = DEFAULT_PROMPT_PREFIX
    prompt_suffix: str = DEFAULT_PROMPT_SUFFIX

    api_key: Optional[str] = None
    base_url: str = "https://api.openai.com/v1"
    llm_model: str = "gpt-4"
    response_timeout: float = Field(default=60.0, gt=0)
    heartbeat_interval: float = Field(default=10.0, gt=0)
    max_retries: int = Field(default=3, ge=1)

    max_iterations: int = Field(default=5, ge=1)
    max_prompt_tokens: Optional[int] = Field(default=None, ge=1)

    @classmethod
    def from_env(
        cls,
        env_file: str | os.PathLike[str] | None = None,
        environ: dict[str, str] | None = None,
        **overrides: object,
    ) -> MendConfig:
        """Build a config from ``MEND_*`` environment variables.

        Args:
            env_file: Optional ``.env`` file loaded before reading the
                environment. Existing variables are not overridden.
            environ: Mapping to read instead of ``os.environ`` (tests).
            **overrides: Field values that take precedence over the environment.

        Raises:
            ConfigError: If a value fails validation.
        """
        if environ is None:
            if env_file is not None:
                load_dotenv(env_file, override=False)
            else:
                load_dotenv(override=False)
            environ = dict(os.environ)

        values: dict[str, object] = {}
        for var, field_name in _ENV_FIELDS.items():
            raw = environ.get(var)
            if raw is not None and raw != "":
                values[field_name] = raw
        values.update({k: v for k, v in overrides.items() if v is not None})

        try:
            config = cls(**values)
        except ValidationError as exc:
            raise ConfigError(f"Invalid configuration: {exc}") from exc
        logger.debug("Loaded configuration fields: %s", sorted(values))
        return config

    def require(self, *field_names: str) -> None:
        """Raise ConfigError if any of the named fields is unset."""
        missing = [name for name in field_names if not getattr(self, name)]
        if missing:
            env_names = [
                var for var, name in _ENV_FIELDS.items() if name in missing
            ]
            raise ConfigError(
                f"Missing configuration: {', '.join(missing)}. "
                f"Set {', '.join(env_names)}."
            )

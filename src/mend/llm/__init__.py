"""LLM infrastructure for Mend.

Provides an OpenAI-compatible HTTP client, the completion backends the
correction loop talks to, and the model selector that picks one.
"""

from mend.llm.backends import (
    DEFAULT_MODEL,
    DRY_RUN_MODEL,
    MOCK_MODEL,
    VALID_MODELS,
    ChatBackend,
    DryRunBackend,
    Heartbeat,
    ScriptedBackend,
    resolve_backend,
    validate_model,
)
from mend.llm.client import ChatCompletionsClient, response_text, response_usage
from mend.llm.errors import (
    MalformedResponseError,
    ModelAuthError,
    ModelCredentialsError,
    ModelRateLimitError,
    ModelServiceError,
    ModelTimeoutError,
    ModelTransportError,
)
from mend.llm.protocols import ChatClient, CompletionBackend

__all__ = [
    "ChatCompletionsClient",
    "response_text",
    "response_usage",
    "ChatClient",
    "CompletionBackend",
    "ChatBackend",
    "ScriptedBackend",
    "DryRunBackend",
    "Heartbeat",
    "resolve_backend",
    "validate_model",
    "VALID_MODELS",
    "DEFAULT_MODEL",
    "MOCK_MODEL",
    "DRY_RUN_MODEL",
    "ModelServiceError",
    "ModelCredentialsError",
    "ModelAuthError",
    "ModelRateLimitError",
    "MalformedResponseError",
    "ModelTransportError",
    "ModelTimeoutError",
]

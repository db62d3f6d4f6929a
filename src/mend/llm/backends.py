"""Completion backends and model selection.

ChatBackend sends a correction prompt through a ChatClient, waits at most
a fixed total time, and emits a heartbeat log line while it waits.
ScriptedBackend replays canned responses ("mock"); DryRunBackend never
suggests anything ("dryrun").
"""

from __future__ import annotations

import concurrent.futures
import logging
import os
import threading
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import TYPE_CHECKING

import httpx

from mend.exceptions import ConfigError, ModelSelectionError
from mend.llm.client import ChatCompletionsClient, response_text
from mend.llm.errors import ModelTimeoutError, ModelTransportError
from mend.models.config import DEFAULT_SYSTEM_MESSAGE

if TYPE_CHECKING:
    from mend.llm.protocols import ChatClient, CompletionBackend
    from mend.models.config import MendConfig

logger = logging.getLogger(__name__)

# The first entry is the default model.
VALID_MODELS: tuple[str, ...] = ("gpt-4", "mock", "dryrun")
DEFAULT_MODEL: str = VALID_MODELS[0]
MOCK_MODEL: str = "mock"
DRY_RUN_MODEL: str = "dryrun"


def validate_model(model: str) -> str:
    """Return ``model`` if it is a known selector.

    Raises:
        ModelSelectionError: If it is not.
    """
    if model not in VALID_MODELS:
        logger.error("Invalid model argument provided: %s", model)
        raise ModelSelectionError(model, VALID_MODELS)
    return model


class Heartbeat:
    """Emits a "still waiting" signal every ``interval`` seconds on a daemon thread.

    The first signal fires immediately. ``cancel()`` stops the timer and
    may be called any number of times.
    """

    def __init__(
        self,
        interval: float,
        emit: Callable[[], None] | None = None,
        message: str = "Waiting for model response...",
    ) -> None:
        self._interval = interval
        self._emit = emit or (lambda: logger.info(message))
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None
        self.beats = 0

    def start(self) -> Heartbeat:
        self._thread = threading.Thread(
            target=self._run, name="mend-heartbeat", daemon=True
        )
        self._thread.start()
        return self

    def _run(self) -> None:
        while not self._stop.is_set():
            self.beats += 1
            try:
                self._emit()
            except Exception:
                logger.debug("heartbeat emit error", exc_info=True)
            if self._stop.wait(self._interval):
                return

    def cancel(self) -> None:
        self._stop.set()
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join(timeout=1.0)

    def __enter__(self) -> Heartbeat:
        return self.start()

    def __exit__(self, *args: object) -> None:
        self.cancel()


class ChatBackend:
    """Completion backend over a chat-completions ChatClient.

    Usage::

        backend = ChatBackend(ChatCompletionsClient("sk-..."), timeout=60)
        text = backend.complete(prompt)
    """

    def __init__(
        self,
        client: ChatClient,
        *,
        model: str | None = None,
        system_message: str = DEFAULT_SYSTEM_MESSAGE,
        timeout: float = 60.0,
        heartbeat_interval: float = 10.0,
        temperature: float | None = None,
    ) -> None:
        self._client = client
        self._model = model
        self._system_message = system_message
        self._timeout = timeout
        self._heartbeat_interval = heartbeat_interval
        self._temperature = temperature

    def complete(self, prompt: str) -> str:
        """Send the prompt and wait for the response text.

        Raises:
            ModelTimeoutError: If no response arrives within the timeout.
            ModelTransportError: If the HTTP request fails.
        """
        messages = [
            {"role": "system", "content": self._system_message},
            {"role": "user", "content": prompt},
        ]
        logger.debug("Fetching correction with prompt: %s", prompt)

        executor = concurrent.futures.ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="mend-llm"
        )
        heartbeat = Heartbeat(self._heartbeat_interval).start()
        try:
            future = executor.submit(
                self._client.chat,
                messages,
                model=self._model,
                temperature=self._temperature,
            )
            try:
                response = future.result(timeout=self._timeout)
            except concurrent.futures.TimeoutError as exc:
                future.cancel()
                logger.critical("Model response took too long to be received")
                raise ModelTimeoutError(self._timeout) from exc
            except httpx.HTTPError as exc:
                raise ModelTransportError(f"Model request failed: {exc}") from exc
        finally:
            heartbeat.cancel()
            executor.shutdown(wait=False, cancel_futures=True)

        content = response_text(response)
        logger.info("Successfully retrieved model response.")
        return content

    def close(self) -> None:
        self._client.close()


class ScriptedBackend:
    """Replays canned responses in order, repeating the last one.

    Records every prompt it receives in ``prompts``.
    """

    def __init__(self, responses: Sequence[str]) -> None:
        if not responses:
            raise ConfigError("ScriptedBackend needs at least one response")
        self._responses = list(responses)
        self.prompts: list[str] = []

    @classmethod
    def from_file(cls, path: str | os.PathLike[str]) -> ScriptedBackend:
        """Load a single canned response from a text file."""
        try:
            text = Path(path).read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigError(f"Cannot read canned responses from {path}: {exc}") from exc
        return cls([text])

    def complete(self, prompt: str) -> str:
        index = min(len(self.prompts), len(self._responses) - 1)
        self.prompts.append(prompt)
        return self._responses[index]


class DryRunBackend:
    """Backend for the dry-run model: it never proposes a correction."""

    def complete(self, prompt: str) -> str:
        return ""


def resolve_backend(
    model: str,
    config: MendConfig,
    *,
    responses_path: str | os.PathLike[str] | None = None,
) -> CompletionBackend:
    """Build the completion backend for a model selector.

    Raises:
        ModelSelectionError: For unknown selectors.
        ConfigError: If the selected backend is missing required settings.
    """
    validate_model(model)
    if model == DRY_RUN_MODEL:
        return DryRunBackend()
    if model == MOCK_MODEL:
        if responses_path is None:
            raise ConfigError("The mock model needs a canned responses file")
        return ScriptedBackend.from_file(responses_path)

    config.require("api_key")
    client = ChatCompletionsClient(
        config.api_key,
        base_url=config.base_url,
        model=config.llm_model,
        timeout=config.response_timeout,
        max_retries=config.max_retries,
    )
    return ChatBackend(
        client,
        model=config.llm_model,
        system_message=config.system_message,
        timeout=config.response_timeout,
        heartbeat_interval=config.heartbeat_interval,
    )

"""Seams between the correction loop and the model service.

The loop only knows CompletionBackend: prompt text in, response text out.
ChatBackend in turn only needs a ChatClient.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class ChatClient(Protocol):
    """Chat-completions transport, e.g. ChatCompletionsClient."""

    def chat(
        self,
        messages: list[dict[str, str]],
        *,
        model: str | None = None,
        temperature: float | None = None,
    ) -> dict: ...

    def close(self) -> None: ...


@runtime_checkable
class CompletionBackend(Protocol):
    """Produces a raw model response for a correction prompt."""

    def complete(self, prompt: str) -> str:
        """Return the response text for ``prompt``.

        Raises:
            ModelTimeoutError: If no response arrived in time.
            ModelTransportError: If the request failed in transit.
        """
        ...

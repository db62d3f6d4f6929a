"""HTTP transport for OpenAI-compatible chat completion services.

One POST per request, retried with tenacity on rate limits, 5xx answers
and failed connections. Credentials and endpoint come from MendConfig;
this module never reads the environment.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
import tenacity

from mend.llm.errors import (
    MalformedResponseError,
    ModelAuthError,
    ModelCredentialsError,
    ModelRateLimitError,
)

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.openai.com/v1"

_SERVER_ERRORS = frozenset({500, 502, 503, 504})


def _should_retry(exc: BaseException) -> bool:
    if isinstance(exc, ModelRateLimitError):
        return True
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code in _SERVER_ERRORS
    return isinstance(exc, (httpx.ConnectError, httpx.ConnectTimeout))


def _retry_after(value: str | None) -> float | None:
    if value is None:
        return None
    try:
        return float(value)
    except ValueError:
        return None


def _check_status(response: httpx.Response) -> None:
    """Turn a non-success answer into the matching error."""
    status = response.status_code
    if status in (401, 403):
        raise ModelAuthError(status, response.text)
    if status == 429:
        raise ModelRateLimitError(_retry_after(response.headers.get("Retry-After")))
    response.raise_for_status()


def response_text(response: dict) -> str:
    """Content of the last choice's message; "" when it has none.

    Raises:
        MalformedResponseError: If there is no choice with a message.
    """
    try:
        return response["choices"][-1]["message"].get("content") or ""
    except (KeyError, IndexError, TypeError, AttributeError) as exc:
        raise MalformedResponseError(
            f"No message in model response ({exc}): {response}"
        ) from exc


def response_usage(response: dict) -> dict | None:
    """Token usage block of a response, if the service sent one."""
    return response.get("usage")


class ChatCompletionsClient:
    """Sync client for the ``/chat/completions`` endpoint.

    Usage::

        with ChatCompletionsClient("sk-...", model="gpt-4") as client:
            text = response_text(client.chat(messages))
    """

    def __init__(
        self,
        api_key: str | None,
        *,
        base_url: str = DEFAULT_BASE_URL,
        model: str = "gpt-4",
        timeout: float = 60.0,
        max_retries: int = 3,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """
        Args:
            api_key: Bearer token for the service.
            base_url: Endpoint root; ``/chat/completions`` is appended.
            model: Model used when ``chat()`` is not given one.
            timeout: Per-request HTTP timeout in seconds.
            max_retries: Attempts in total for retryable failures.
            transport: httpx transport override (tests).

        Raises:
            ModelCredentialsError: If ``api_key`` is empty.
        """
        if not api_key:
            raise ModelCredentialsError(
                "No API key configured for the chat model. Set MEND_OPENAI_API_KEY."
            )
        self.model = model
        self._url = base_url.rstrip("/") + "/chat/completions"
        self._max_retries = max_retries
        self._http = httpx.Client(
            timeout=timeout,
            transport=transport,
            headers={"Authorization": f"Bearer {api_key}"},
        )

    @property
    def url(self) -> str:
        return self._url

    def chat(
        self,
        messages: list[dict[str, str]],
        *,
        model: str | None = None,
        temperature: float | None = None,
    ) -> dict:
        """POST one chat completion request, retrying transient failures.

        Raises:
            ModelAuthError: On 401/403, without retrying.
            ModelRateLimitError: On 429 once retries are used up.
            MalformedResponseError: If the body has no ``choices``.
            httpx.HTTPError: On other HTTP or connection failures.
        """
        payload: dict[str, Any] = {"model": model or self.model, "messages": messages}
        if temperature is not None:
            payload["temperature"] = temperature

        retrying = tenacity.Retrying(
            retry=tenacity.retry_if_exception(_should_retry),
            wait=tenacity.wait_exponential(multiplier=1, min=1, max=30) + tenacity.wait_random(0, 2),
            stop=tenacity.stop_after_attempt(self._max_retries),
            before_sleep=tenacity.before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        return retrying(self._post, payload)

    def _post(self, payload: dict[str, Any]) -> dict:
        logger.info("Sending API request to %s", self._url)
        response = self._http.post(self._url, json=payload)
        _check_status(response)
        logger.info("API response received with status code %s", response.status_code)

        try:
            body = response.json()
        except ValueError as exc:
            raise MalformedResponseError(
                f"Model response is not JSON (status {response.status_code}): {response.text[:200]!r}"
            ) from exc
        if not isinstance(body, dict) or "choices" not in body:
            raise MalformedResponseError(f"Model response has no 'choices': {body}")
        return body

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> ChatCompletionsClient:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

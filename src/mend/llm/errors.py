"""Errors raised while talking to the correction model.

Every error here is a MendError. A timeout and a transport failure are
different kinds: on a timeout the request went out and no answer came
back within the bound.
"""

from __future__ import annotations

from mend.exceptions import ConfigError, MendError


class ModelServiceError(MendError):
    """Base for failures of the correction model service."""


class ModelCredentialsError(ModelServiceError, ConfigError):
    """No API key is configured for the chat model."""


class ModelAuthError(ModelServiceError):
    """The service rejected the API key.

    Attributes:
        status_code: 401 or 403.
    """

    def __init__(self, status_code: int, detail: str = "") -> None:
        self.status_code = status_code
        message = f"Model service rejected the API key (HTTP {status_code})"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class ModelRateLimitError(ModelServiceError):
    """HTTP 429, still failing after every retry.

    Attributes:
        retry_after: Seconds from the Retry-After header, or None.
    """

    def __init__(self, retry_after: float | None = None) -> None:
        self.retry_after = retry_after
        message = "Model service rate limit reached"
        if retry_after is not None:
            message = f"{message} (retry after {retry_after}s)"
        super().__init__(message)


class MalformedResponseError(ModelServiceError):
    """The service answered, but not with a chat completion."""


class ModelTransportError(ModelServiceError):
    """The request failed at the HTTP or connection level."""


class ModelTimeoutError(ModelServiceError):
    """No response arrived within the configured total timeout.

    Attributes:
        timeout: The bound that was exceeded, in seconds.
    """

    def __init__(self, timeout: float) -> None:
        self.timeout = timeout
        super().__init__(f"Model response took longer than {timeout}s")

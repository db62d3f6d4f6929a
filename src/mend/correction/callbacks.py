"""Status event callbacks for the correction loop.

Provides ``notify`` for emitting events and ``log_event``, a ready-made
callback that writes each transition to the log.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from mend.correction.models import LoopState, StatusEvent

logger = logging.getLogger(__name__)


def notify(
    callback: Callable[[StatusEvent], None] | None,
    state: LoopState,
    message: str = "",
    **payload: Any,
) -> StatusEvent:
    """Build a StatusEvent and hand it to ``callback``.

    Callback errors are logged and never interrupt the run.
    """
    event = StatusEvent(state=state, message=message, payload=payload)
    if callback is not None:
        try:
            callback(event)
        except Exception:
            logger.debug("on_event callback error", exc_info=True)
    return event


def log_event(event: StatusEvent) -> None:
    """Log a status event at INFO (FAILED at ERROR)."""
    level = logging.ERROR if event.state == LoopState.FAILED else logging.INFO
    if event.message:
        logger.log(level, "[%s] %s", event.state.value, event.message)
    else:
        logger.log(level, "[%s]", event.state.value)

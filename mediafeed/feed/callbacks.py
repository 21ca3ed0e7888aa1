from __future__ import annotations

import inspect
import logging
from typing import Awaitable, Callable, Union

LOGGER = logging.getLogger(__name__)

StatusSink = Callable[[str, bool], Union[None, Awaitable[None]]]
StallDecision = Callable[[], Union[bool, Awaitable[bool]]]


async def emit_status(sink: StatusSink | None, message: str, is_error: bool = False) -> None:
    """Deliver a status line; a failing sink is logged and never stops the run."""
    if sink is None:
        return
    try:
        outcome = sink(message, is_error)
        if inspect.isawaitable(outcome):
            await outcome
    except Exception:
        LOGGER.exception("Status sink failed", extra={"status": message})


async def ask_to_continue(decide: StallDecision | None) -> bool:
    if decide is None:
        return False
    answer = decide()
    if inspect.isawaitable(answer):
        answer = await answer
    return bool(answer)

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Sequence

from ..errors import FetchError
from ..provider.base import ListingItem, ListingProvider
from .callbacks import StallDecision, StatusSink, ask_to_continue, emit_status
from .classify import Media, classify
from .models import FeedRequest, RunState, StopReason

LOGGER = logging.getLogger(__name__)

MAX_PAGE_SIZE = 100
PAGE_SIZE_HEADROOM = 5
MIN_REQUESTS = 3
REQUESTS_PER_ITEM = 3
STALL_ATTEMPTS = 3


def page_size_for(limit: int) -> int:
    return min(limit + PAGE_SIZE_HEADROOM, MAX_PAGE_SIZE)


def request_budget_for(limit: int) -> int:
    if limit == 1:
        return MIN_REQUESTS
    return max(MIN_REQUESTS, limit * REQUESTS_PER_ITEM)


class Paginator:
    """Walks listing pages until enough media items are collected.

    The loop ends when the limit is met, the request budget is spent, the
    listing runs out, a page request fails, or the operator declines to keep
    going after a stall. None of these raise; the reason is recorded on the
    returned state.
    """

    def __init__(
        self,
        provider: ListingProvider,
        *,
        rate_limit_seconds: float = 1.0,
        stall_extension: int = 1,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._provider = provider
        self._rate_limit_seconds = rate_limit_seconds
        self._stall_extension = max(stall_extension, 1)
        self._sleep = sleep

    async def run(
        self,
        token: str,
        request: FeedRequest,
        *,
        budget: int,
        page_size: int,
        on_status: StatusSink | None = None,
        on_stall: StallDecision | None = None,
        state: RunState | None = None,
    ) -> RunState:
        state = state if state is not None else RunState()
        limit = request.limit
        query = request.to_query(page_size)
        seen_cursors: set[str] = set()
        stall_asked = False

        while len(state.media) < limit and state.requests_issued < budget:
            state.requests_issued += 1
            try:
                page = await self._provider.fetch_page(token, query, state.after)
            except FetchError as exc:
                LOGGER.warning(
                    "Page request failed",
                    extra={"source": request.source, "request": state.requests_issued, "error": str(exc)},
                )
                await emit_status(on_status, f"Error fetching posts: {exc}", True)
                state.stop_reason = StopReason.FETCH_FAILED
                break

            if not page.items:
                state.stop_reason = StopReason.END_OF_STREAM
                break

            self._absorb(page.items, state, limit)
            LOGGER.debug(
                "Processed page",
                extra={
                    "request": state.requests_issued,
                    "items": len(page.items),
                    "media": len(state.media),
                    "non_media": len(state.non_media),
                },
            )
            if len(state.media) >= limit:
                state.stop_reason = StopReason.SATISFIED
                break

            if (
                limit == 1
                and not stall_asked
                and state.requests_issued == STALL_ATTEMPTS
                and not state.media
            ):
                stall_asked = True
                if not await ask_to_continue(on_stall):
                    await emit_status(on_status, "Stopped fetching: No image posts found", True)
                    state.stop_reason = StopReason.STALLED_ABORTED
                    break
                budget += self._stall_extension
                LOGGER.info("Continuing after stall", extra={"budget": budget})

            if not page.after:
                state.stop_reason = StopReason.END_OF_STREAM
                break
            if page.after in seen_cursors:
                LOGGER.warning("Listing cursor repeated, stopping", extra={"after": page.after})
                state.stop_reason = StopReason.END_OF_STREAM
                break
            seen_cursors.add(page.after)
            state.after = page.after

            await emit_status(on_status, f"{len(state.media)}/{limit} fetched")
            if state.requests_issued < budget:
                await self._sleep(self._rate_limit_seconds)

        if state.stop_reason is None:
            state.stop_reason = StopReason.BUDGET_EXHAUSTED
        return state

    @staticmethod
    def _absorb(items: Sequence[ListingItem], state: RunState, limit: int) -> None:
        for index, item in enumerate(items):
            result = classify(item)
            if isinstance(result, Media) and len(state.media) < limit:
                state.media.append(result.item)
            else:
                state.non_media.append(item)
            if len(state.media) >= limit:
                # Rest of the page goes to non-media as-is
                state.non_media.extend(items[index + 1 :])
                break

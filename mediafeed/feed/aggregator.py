from __future__ import annotations

import logging

from ..errors import AuthError
from .auth import Authenticator
from .callbacks import StallDecision, StatusSink, emit_status
from .models import Credentials, FeedRequest, FeedResult, RunState, StopReason
from .paginator import Paginator, page_size_for, request_budget_for

LOGGER = logging.getLogger(__name__)


class Aggregator:
    def __init__(self, *, authenticator: Authenticator, paginator: Paginator) -> None:
        self._authenticator = authenticator
        self._paginator = paginator

    async def fetch(
        self,
        credentials: Credentials,
        request: FeedRequest,
        *,
        on_status: StatusSink | None = None,
        on_stall: StallDecision | None = None,
    ) -> FeedResult:
        state = RunState()
        try:
            return await self._fetch(credentials, request, state, on_status, on_stall)
        except Exception as exc:
            LOGGER.exception("Feed run failed", extra={"source": request.source})
            await emit_status(on_status, f"Error fetching posts: {exc}", True)
            return FeedResult.from_state(state, fallback=StopReason.FETCH_FAILED)

    async def _fetch(
        self,
        credentials: Credentials,
        request: FeedRequest,
        state: RunState,
        on_status: StatusSink | None,
        on_stall: StallDecision | None,
    ) -> FeedResult:
        LOGGER.info(
            "Starting feed run",
            extra={
                "source": request.source,
                "sort": request.sort.value,
                "time_filter": request.time_filter.value if request.time_filter else None,
                "limit": request.limit,
            },
        )
        await emit_status(on_status, "Fetching posts...")
        try:
            token = await self._authenticator.authenticate(credentials, on_status)
        except AuthError:
            await emit_status(on_status, "Only 0 image posts found", True)
            return FeedResult.empty(StopReason.AUTH_FAILED)

        await self._paginator.run(
            token,
            request,
            budget=request_budget_for(request.limit),
            page_size=page_size_for(request.limit),
            on_status=on_status,
            on_stall=on_stall,
            state=state,
        )
        result = FeedResult.from_state(state)
        LOGGER.info(
            "Feed run finished",
            extra={
                "source": request.source,
                "media": len(result.media),
                "non_media": len(result.non_media),
                "requests": result.requests,
                "stop_reason": result.stop_reason.value,
            },
        )
        if result.stop_reason is not StopReason.FETCH_FAILED:
            await emit_status(on_status, f"Successfully fetched {len(result.media)} image posts")
        if len(result.media) < request.limit:
            await emit_status(on_status, f"Only {len(result.media)} image posts found", True)
        return result

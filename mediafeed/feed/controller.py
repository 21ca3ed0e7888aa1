from __future__ import annotations

import logging
from typing import Any

from ..errors import ConfigError
from .aggregator import Aggregator
from .callbacks import StallDecision, StatusSink
from .models import Credentials, FeedRequest, FeedResult, Sort

LOGGER = logging.getLogger(__name__)

_UNSET: Any = object()


class FeedController:
    """Re-runs the aggregator whenever feed parameters change.

    Runs are not cancelled when parameters change mid-flight. Each run is
    tagged with a generation number, and a run that finishes after a newer
    one has started is reported as stale: ``refresh`` returns ``None`` for it
    and ``last_result`` is left alone.
    """

    def __init__(
        self,
        aggregator: Aggregator,
        credentials: Credentials,
        request: FeedRequest | None = None,
        *,
        on_status: StatusSink | None = None,
        on_stall: StallDecision | None = None,
    ) -> None:
        self._aggregator = aggregator
        self._credentials = credentials
        self._request = request
        self._on_status = on_status
        self._on_stall = on_stall
        self._generation = 0
        self.last_result: FeedResult | None = None

    @property
    def request(self) -> FeedRequest | None:
        return self._request

    @property
    def generation(self) -> int:
        return self._generation

    def configure(
        self,
        *,
        source: str | None = _UNSET,
        sort: Sort | str | None = _UNSET,
        time_filter: Any = _UNSET,
        limit: Any = _UNSET,
    ) -> FeedRequest:
        current = self._request
        if sort is _UNSET:
            sort = current.sort if current else None
        if time_filter is _UNSET:
            # Switching into "top" starts from the default window
            keep = current is not None and current.sort is Sort.TOP
            time_filter = current.time_filter if keep else None
        if source is _UNSET:
            source = current.source if current else None
        if limit is _UNSET:
            limit = current.limit if current else None
        self._request = FeedRequest.build(source=source, sort=sort, limit=limit, time_filter=time_filter)
        return self._request

    async def update(
        self,
        *,
        on_status: StatusSink | None = None,
        on_stall: StallDecision | None = None,
        **changes: Any,
    ) -> FeedResult | None:
        self.configure(**changes)
        return await self.refresh(on_status=on_status, on_stall=on_stall)

    async def refresh(
        self,
        *,
        on_status: StatusSink | None = None,
        on_stall: StallDecision | None = None,
    ) -> FeedResult | None:
        if self._request is None:
            raise ConfigError("Please enter a subreddit or multireddit")
        self._generation += 1
        generation = self._generation
        result = await self._aggregator.fetch(
            self._credentials,
            self._request,
            on_status=on_status or self._on_status,
            on_stall=on_stall or self._on_stall,
        )
        if generation != self._generation:
            LOGGER.debug(
                "Discarding stale feed result",
                extra={"generation": generation, "current": self._generation},
            )
            return None
        self.last_result = result
        return result

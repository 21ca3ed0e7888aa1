from __future__ import annotations

import enum
import re
from dataclasses import dataclass, field
from typing import Any, Optional

from ..errors import ConfigError
from ..provider.base import ListingItem, ListingQuery

MIN_LIMIT = 1
MAX_LIMIT = 100
DEFAULT_LIMIT = 5


class Sort(str, enum.Enum):
    BEST = "best"
    HOT = "hot"
    NEW = "new"
    TOP = "top"
    RISING = "rising"
    CONTROVERSIAL = "controversial"


class TimeFilter(str, enum.Enum):
    HOUR = "hour"
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"
    ALL = "all"


class StopReason(str, enum.Enum):
    SATISFIED = "satisfied"
    BUDGET_EXHAUSTED = "budget_exhausted"
    END_OF_STREAM = "end_of_stream"
    STALLED_ABORTED = "stalled_aborted"
    FETCH_FAILED = "fetch_failed"
    AUTH_FAILED = "auth_failed"


def _parse_enum(enum_cls: type[enum.Enum], value: Any, label: str) -> Any:
    if isinstance(value, enum_cls):
        return value
    text = str(value or "").strip().lower()
    try:
        return enum_cls(text)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ConfigError(f"Unknown {label} '{value}', expected one of: {allowed}") from None


def parse_sort(value: Sort | str) -> Sort:
    return _parse_enum(Sort, value, "sort")


def parse_time_filter(value: TimeFilter | str) -> TimeFilter:
    return _parse_enum(TimeFilter, value, "time filter")


_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def clamp_limit(value: Any, default: int = DEFAULT_LIMIT) -> int:
    # Leading digits count, so "7abc" is 7 and "2.5" is 2
    match = _LEADING_INT.match(str(value)) if value is not None else None
    limit = int(match.group(1)) if match else 0
    if limit == 0:
        limit = default
    return min(max(limit, MIN_LIMIT), MAX_LIMIT)


def normalize_source(value: str | None) -> str:
    source = (value or "").strip()
    for prefix in ("/r/", "r/"):
        if source.lower().startswith(prefix):
            source = source[len(prefix) :]
            break
    source = source.strip("/ ")
    if not source:
        raise ConfigError("Please enter a subreddit or multireddit")
    return source


@dataclass(slots=True, frozen=True)
class Credentials:
    client_id: str
    client_secret: str = field(repr=False)

    @classmethod
    def build(cls, client_id: str | None, client_secret: str | None) -> "Credentials":
        client_id = (client_id or "").strip()
        client_secret = (client_secret or "").strip()
        if not client_id or not client_secret:
            raise ConfigError("Please enter Client ID and Secret")
        return cls(client_id=client_id, client_secret=client_secret)


@dataclass(slots=True, frozen=True)
class FeedRequest:
    source: str
    sort: Sort = Sort.BEST
    limit: int = DEFAULT_LIMIT
    time_filter: Optional[TimeFilter] = None

    @classmethod
    def build(
        cls,
        source: str | None,
        sort: Sort | str | None = None,
        limit: Any = None,
        time_filter: TimeFilter | str | None = None,
    ) -> "FeedRequest":
        parsed_sort = parse_sort(sort) if sort else Sort.BEST
        parsed_time: TimeFilter | None = None
        if parsed_sort is Sort.TOP:
            parsed_time = parse_time_filter(time_filter) if time_filter else TimeFilter.DAY
        return cls(
            source=normalize_source(source),
            sort=parsed_sort,
            limit=clamp_limit(limit),
            time_filter=parsed_time,
        )

    def to_query(self, page_size: int) -> ListingQuery:
        return ListingQuery(
            source=self.source,
            sort=self.sort.value,
            limit=page_size,
            time_filter=self.time_filter.value if self.time_filter else None,
        )


@dataclass(slots=True)
class RunState:
    media: list[ListingItem] = field(default_factory=list)
    non_media: list[ListingItem] = field(default_factory=list)
    after: Optional[str] = None
    requests_issued: int = 0
    stop_reason: Optional[StopReason] = None


@dataclass(slots=True, frozen=True)
class FeedResult:
    media: tuple[ListingItem, ...]
    non_media: tuple[ListingItem, ...]
    stop_reason: StopReason
    requests: int = 0

    @classmethod
    def from_state(cls, state: RunState, fallback: StopReason = StopReason.END_OF_STREAM) -> "FeedResult":
        return cls(
            media=tuple(state.media),
            non_media=tuple(state.non_media),
            stop_reason=state.stop_reason or fallback,
            requests=state.requests_issued,
        )

    @classmethod
    def empty(cls, stop_reason: StopReason) -> "FeedResult":
        return cls(media=(), non_media=(), stop_reason=stop_reason)

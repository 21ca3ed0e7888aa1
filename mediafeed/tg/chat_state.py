from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from ..config import FeedConfig
from ..feed.aggregator import Aggregator
from ..feed.controller import FeedController
from ..feed.models import Credentials, Sort, TimeFilter, clamp_limit, parse_sort


@dataclass(slots=True)
class ChatSettings:
    source: Optional[str] = None
    sort: Sort = Sort.BEST
    time_filter: Optional[TimeFilter] = None
    limit: int = 5

    def choose_sort(self, sort: Sort) -> None:
        self.sort = sort
        self.time_filter = TimeFilter.DAY if sort is Sort.TOP else None

    def describe(self) -> str:
        lines = [
            "Settings:",
            f"• Source: {self.source or '(not set)'}",
            f"• Sort: {self.sort.value}",
        ]
        if self.sort is Sort.TOP and self.time_filter:
            lines.append(f"• Time: {self.time_filter.value}")
        lines.append(f"• Limit: {self.limit}")
        return "\n".join(lines)


@dataclass
class ChatFeeds:
    """In-memory settings and feed controller for every chat."""

    aggregator: Aggregator
    credentials: Credentials
    defaults: FeedConfig
    _settings: dict[int, ChatSettings] = field(default_factory=dict, init=False, repr=False)
    _controllers: dict[int, FeedController] = field(default_factory=dict, init=False, repr=False)

    def settings(self, chat_id: int) -> ChatSettings:
        settings = self._settings.get(chat_id)
        if settings is None:
            settings = ChatSettings(
                source=self.defaults.default_source,
                limit=clamp_limit(self.defaults.default_limit),
            )
            settings.choose_sort(parse_sort(self.defaults.default_sort))
            self._settings[chat_id] = settings
        return settings

    def controller(self, chat_id: int) -> FeedController:
        controller = self._controllers.get(chat_id)
        if controller is None:
            controller = FeedController(self.aggregator, self.credentials)
            self._controllers[chat_id] = controller
        return controller

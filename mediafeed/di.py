from __future__ import annotations

import logging

from aiogram import Bot, Dispatcher

from .config import AppConfig
from .feed.aggregator import Aggregator
from .feed.auth import Authenticator
from .feed.models import Credentials
from .feed.paginator import Paginator
from .provider.reddit_http import RedditHttpProvider
from .tg.bot import create_bot, create_dispatcher
from .tg.chat_state import ChatFeeds
from .tg.stall import StallPrompts

LOGGER = logging.getLogger(__name__)


class Container:
    def __init__(self, config: AppConfig) -> None:
        if not config.telegram.token:
            raise RuntimeError("TELEGRAM_BOT_TOKEN is not set")
        self.config = config
        self.credentials = Credentials.build(config.reddit.client_id, config.reddit.client_secret)
        self.provider = RedditHttpProvider(config.reddit)
        self.aggregator = Aggregator(
            authenticator=Authenticator(self.provider),
            paginator=Paginator(
                self.provider,
                rate_limit_seconds=config.feed.rate_limit_seconds,
                stall_extension=config.feed.stall_extension,
            ),
        )
        self.bot: Bot = create_bot(config.telegram.token)
        self.dispatcher: Dispatcher = create_dispatcher()
        self.feeds = ChatFeeds(aggregator=self.aggregator, credentials=self.credentials, defaults=config.feed)
        self.prompts = StallPrompts(self.bot, timeout=config.telegram.stall_timeout_seconds)

    async def shutdown(self) -> None:
        try:
            await self.provider.shutdown()
        finally:
            await self.bot.session.close()
            LOGGER.info("Container shut down")

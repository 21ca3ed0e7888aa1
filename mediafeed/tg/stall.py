from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable

from aiogram import Bot

from .keyboards import stall_keyboard

LOGGER = logging.getLogger(__name__)
STALL_QUESTION = "No image posts found after 3 attempts. Continue fetching?"


class StallPrompts:
    """Asks a chat whether to keep fetching and waits for the button press.

    One question may be open per chat. Asking again declines the older one,
    and an unanswered question is declined after ``timeout`` seconds.
    """

    def __init__(self, bot: Bot, *, timeout: float = 60.0) -> None:
        self._bot = bot
        self._timeout = timeout
        self._pending: dict[int, asyncio.Future[bool]] = {}

    def for_chat(self, chat_id: int) -> Callable[[], Awaitable[bool]]:
        async def decide() -> bool:
            return await self.ask(chat_id)

        return decide

    def is_pending(self, chat_id: int) -> bool:
        future = self._pending.get(chat_id)
        return future is not None and not future.done()

    async def ask(self, chat_id: int) -> bool:
        previous = self._pending.pop(chat_id, None)
        if previous is not None and not previous.done():
            previous.set_result(False)
        future: asyncio.Future[bool] = asyncio.get_running_loop().create_future()
        self._pending[chat_id] = future
        try:
            await self._bot.send_message(chat_id, STALL_QUESTION, reply_markup=stall_keyboard())
            return await asyncio.wait_for(future, self._timeout)
        except asyncio.TimeoutError:
            LOGGER.info("Stall question timed out", extra={"chat_id": chat_id})
            return False
        finally:
            if self._pending.get(chat_id) is future:
                del self._pending[chat_id]

    def resolve(self, chat_id: int, answer: bool) -> bool:
        future = self._pending.get(chat_id)
        if future is None or future.done():
            return False
        future.set_result(answer)
        return True

from __future__ import annotations

import html
import logging
from typing import Sequence

from aiogram import Bot
from aiogram.exceptions import TelegramAPIError

from ..feed.classify import normalize_url
from ..feed.models import FeedResult
from ..provider.base import ListingItem

LOGGER = logging.getLogger(__name__)
TITLE_LIMIT = 100
NON_MEDIA_HEADER = "Other posts:"


class TelegramStatus:
    """Status sink that keeps one message per run and edits it in place."""

    def __init__(self, bot: Bot, chat_id: int) -> None:
        self._bot = bot
        self._chat_id = chat_id
        self._message_id: int | None = None
        self._last: str | None = None

    async def __call__(self, message: str, is_error: bool = False) -> None:
        text = f"⚠️ {message}" if is_error else message
        if text == self._last:
            return
        self._last = text
        try:
            if self._message_id is None:
                sent = await self._bot.send_message(self._chat_id, text)
                self._message_id = sent.message_id
            else:
                await self._bot.edit_message_text(text=text, chat_id=self._chat_id, message_id=self._message_id)
        except TelegramAPIError as exc:
            LOGGER.debug("Status update rejected", extra={"chat_id": self._chat_id, "error": str(exc)})


def format_caption(item: ListingItem) -> str:
    title = item.title[:TITLE_LIMIT] or "(untitled)"
    return f"{title}\n{item.link}" if item.link else title


def format_listing_line(item: ListingItem) -> str:
    return f"Permalink: {item.link or '-'} | URL: {item.url or '-'}"


def chunk_lines(lines: Sequence[str], *, header: str = "", max_chars: int = 3500) -> list[str]:
    chunks: list[str] = []
    current: list[str] = []
    base_len = len(header) + (1 if header else 0)
    cur_len = base_len
    for idx, line in enumerate(lines, start=1):
        entry = f"{idx}. {line}"
        add_len = len(entry) + 1
        if current and cur_len + add_len > max_chars:
            chunks.append((header + "\n" if header else "") + "\n".join(current))
            current = [entry]
            cur_len = base_len + add_len
        else:
            current.append(entry)
            cur_len += add_len
    if current:
        chunks.append((header + "\n" if header else "") + "\n".join(current))
    return chunks


async def send_media_item(bot: Bot, chat_id: int, item: ListingItem) -> None:
    # Preview URLs come HTML-escaped from the API
    url = html.unescape(item.url)
    caption = format_caption(item)
    if normalize_url(url).endswith(".gif"):
        await bot.send_animation(chat_id, animation=url, caption=caption)
    else:
        await bot.send_photo(chat_id, photo=url, caption=caption)


async def send_result(bot: Bot, chat_id: int, result: FeedResult) -> list[ListingItem]:
    """Send media as photos and everything else as link lists.

    Media that Telegram refuses to display is listed together with the
    non-media posts. Returns the refused items.
    """
    rejected: list[ListingItem] = []
    for item in result.media:
        try:
            await send_media_item(bot, chat_id, item)
        except TelegramAPIError as exc:
            LOGGER.info("Media rejected by Telegram", extra={"url": item.url, "error": str(exc)})
            rejected.append(item)

    lines = [format_listing_line(item) for item in (*result.non_media, *rejected)]
    for text in chunk_lines(lines, header=NON_MEDIA_HEADER):
        await bot.send_message(chat_id, text)
    return rejected

from __future__ import annotations

import asyncio
from types import SimpleNamespace
from unittest.mock import AsyncMock

from aiogram.exceptions import TelegramBadRequest
from aiogram.methods import SendMessage

from mediafeed.feed.models import FeedResult, StopReason
from mediafeed.provider.base import ListingItem
from mediafeed.tg.render import (
    NON_MEDIA_HEADER,
    TelegramStatus,
    chunk_lines,
    format_caption,
    format_listing_line,
    send_result,
)


def _bad_request(text: str) -> TelegramBadRequest:
    return TelegramBadRequest(method=SendMessage(chat_id=1, text="x"), message=text)


def _item(name: str, url: str) -> ListingItem:
    return ListingItem.from_payload({"title": name, "url": url, "permalink": f"/r/pics/comments/{name}/"})


def test_chunk_lines_numbers_and_splits() -> None:
    lines = [f"line {n}" for n in range(1, 6)]
    chunks = chunk_lines(lines, header="Head", max_chars=30)
    assert chunks[0].startswith("Head\n1. line 1")
    assert all(chunk.startswith("Head\n") for chunk in chunks)
    assert all(len(chunk) <= 30 for chunk in chunks)
    joined = "\n".join(chunks)
    for n in range(1, 6):
        assert f"{n}. line {n}" in joined
    assert chunk_lines([]) == []


def test_format_caption_truncates_title() -> None:
    item = _item("t" * 150, "https://i.redd.it/a.jpg")
    caption = format_caption(item)
    title, link = caption.split("\n")
    assert title == "t" * 100
    assert link == item.link


def test_format_listing_line() -> None:
    item = _item("x", "https://example.com/page")
    assert format_listing_line(item) == (
        "Permalink: https://reddit.com/r/pics/comments/x/ | URL: https://example.com/page"
    )


def test_status_sends_once_then_edits() -> None:
    bot = AsyncMock()
    bot.send_message.return_value = SimpleNamespace(message_id=77)
    status = TelegramStatus(bot, chat_id=5)

    async def scenario() -> None:
        await status("Fetching posts...")
        await status("1/3 fetched")
        await status("1/3 fetched")
        await status("Only 1 image posts found", True)

    asyncio.run(scenario())

    bot.send_message.assert_awaited_once_with(5, "Fetching posts...")
    assert bot.edit_message_text.await_count == 2
    last = bot.edit_message_text.await_args.kwargs
    assert last == {"text": "⚠️ Only 1 image posts found", "chat_id": 5, "message_id": 77}


def test_status_ignores_rejected_edit() -> None:
    bot = AsyncMock()
    bot.send_message.return_value = SimpleNamespace(message_id=1)
    bot.edit_message_text.side_effect = _bad_request("Bad Request: message is not modified")
    status = TelegramStatus(bot, chat_id=5)

    async def scenario() -> None:
        await status("a")
        await status("b")

    asyncio.run(scenario())
    assert bot.edit_message_text.await_count == 1


def test_send_result_routes_media_and_lists_rejected() -> None:
    photo = _item("photo", "https://preview.redd.it/p.jpg?width=1&amp;s=abc")
    gif = _item("gif", "https://i.redd.it/anim.GIF")
    broken = _item("broken", "https://i.example.com/broken.png")
    other = _item("other", "https://example.com/article")
    result = FeedResult(media=(photo, gif, broken), non_media=(other,), stop_reason=StopReason.SATISFIED)

    bot = AsyncMock()

    async def send_photo(chat_id, photo, caption):
        if "broken" in photo:
            raise _bad_request("Bad Request: wrong file identifier/HTTP URL specified")

    bot.send_photo.side_effect = send_photo

    rejected = asyncio.run(send_result(bot, 9, result))

    assert rejected == [broken]
    photo_urls = [call.kwargs["photo"] for call in bot.send_photo.await_args_list]
    assert photo_urls == ["https://preview.redd.it/p.jpg?width=1&s=abc", "https://i.example.com/broken.png"]
    bot.send_animation.assert_awaited_once()
    assert bot.send_animation.await_args.kwargs["animation"] == "https://i.redd.it/anim.GIF"

    [listing] = [call.args[1] for call in bot.send_message.await_args_list]
    assert listing.startswith(NON_MEDIA_HEADER)
    assert "1. Permalink: https://reddit.com/r/pics/comments/other/" in listing
    assert "2. Permalink: https://reddit.com/r/pics/comments/broken/" in listing


def test_send_result_without_non_media_sends_no_listing() -> None:
    bot = AsyncMock()
    result = FeedResult(media=(_item("a", "https://i.redd.it/a.png"),), non_media=(), stop_reason=StopReason.SATISFIED)
    asyncio.run(send_result(bot, 1, result))
    bot.send_message.assert_not_awaited()

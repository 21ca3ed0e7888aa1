from __future__ import annotations

import logging
from textwrap import dedent

from aiogram import Bot, F, Router
from aiogram.exceptions import TelegramAPIError
from aiogram.filters import Command, CommandObject, CommandStart
from aiogram.types import CallbackQuery, Message

from ..errors import ConfigError
from ..feed.models import Sort, clamp_limit, normalize_source, parse_sort, parse_time_filter
from .chat_state import ChatFeeds
from .keyboards import (
    BUTTON_FEED,
    BUTTON_HELP,
    BUTTON_SETTINGS,
    BUTTON_SORT,
    main_menu_keyboard,
    sort_keyboard,
    time_keyboard,
)
from .render import TelegramStatus, send_result
from .stall import StallPrompts

LOGGER = logging.getLogger(__name__)

HELP_TEXT = dedent(
    """
    Send a subreddit name (e.g. pics or pics+aww) and I will collect image posts from it.

    Commands:
    /source <name> — set the subreddit and fetch
    /limit <1-100> — number of image posts to collect
    /sort — choose sorting (and time window for top)
    /feed — fetch again with the current settings
    /settings — show current settings
    """
).strip()


def create_router(feeds: ChatFeeds, prompts: StallPrompts) -> Router:
    router = Router()

    async def run_feed(bot: Bot, chat_id: int) -> None:
        settings = feeds.settings(chat_id)
        controller = feeds.controller(chat_id)
        try:
            result = await controller.update(
                source=settings.source,
                sort=settings.sort,
                time_filter=settings.time_filter,
                limit=settings.limit,
                on_status=TelegramStatus(bot, chat_id),
                on_stall=prompts.for_chat(chat_id),
            )
        except ConfigError as exc:
            await bot.send_message(chat_id, str(exc))
            return
        if result is None:
            return
        try:
            await send_result(bot, chat_id, result)
        except TelegramAPIError:
            LOGGER.exception("Failed to deliver feed", extra={"chat_id": chat_id})

    @router.message(CommandStart())
    async def command_start(message: Message) -> None:
        await message.answer(
            "Hi! I collect image posts from Reddit listings.\n\n" + HELP_TEXT,
            reply_markup=main_menu_keyboard(),
        )

    @router.message(Command("help"))
    @router.message(F.text == BUTTON_HELP)
    async def command_help(message: Message) -> None:
        await message.answer(HELP_TEXT)

    @router.message(Command("settings"))
    @router.message(F.text == BUTTON_SETTINGS)
    async def command_settings(message: Message) -> None:
        await message.answer(feeds.settings(message.chat.id).describe())

    @router.message(Command("feed"))
    @router.message(F.text == BUTTON_FEED)
    async def command_feed(message: Message, bot: Bot) -> None:
        await run_feed(bot, message.chat.id)

    @router.message(Command("source"))
    async def command_source(message: Message, command: CommandObject, bot: Bot) -> None:
        try:
            source = normalize_source(command.args)
        except ConfigError as exc:
            await message.answer(f"{exc}. Usage: /source <name>")
            return
        feeds.settings(message.chat.id).source = source
        await run_feed(bot, message.chat.id)

    @router.message(Command("limit"))
    async def command_limit(message: Message, command: CommandObject, bot: Bot) -> None:
        raw = (command.args or "").strip()
        if not raw.isdigit():
            await message.answer("Usage: /limit <1-100>")
            return
        settings = feeds.settings(message.chat.id)
        settings.limit = clamp_limit(raw)
        await message.answer(f"Limit set to {settings.limit}")
        await run_feed(bot, message.chat.id)

    @router.message(Command("sort"))
    @router.message(F.text == BUTTON_SORT)
    async def command_sort(message: Message) -> None:
        settings = feeds.settings(message.chat.id)
        await message.answer("Choose sorting:", reply_markup=sort_keyboard(settings.sort))

    @router.callback_query(F.data.startswith("sort:"))
    async def sort_chosen(callback: CallbackQuery, bot: Bot) -> None:
        if callback.message is None:
            await callback.answer()
            return
        chat_id = callback.message.chat.id
        try:
            sort = parse_sort((callback.data or "").split(":", 1)[1])
        except (ConfigError, IndexError):
            await callback.answer("Unknown sort", show_alert=False)
            return
        settings = feeds.settings(chat_id)
        settings.choose_sort(sort)
        await callback.answer(f"Sort: {sort.value}")
        if sort is Sort.TOP:
            await bot.send_message(chat_id, "Time window:", reply_markup=time_keyboard(settings.time_filter))
        await run_feed(bot, chat_id)

    @router.callback_query(F.data.startswith("time:"))
    async def time_chosen(callback: CallbackQuery, bot: Bot) -> None:
        if callback.message is None:
            await callback.answer()
            return
        chat_id = callback.message.chat.id
        settings = feeds.settings(chat_id)
        if settings.sort is not Sort.TOP:
            await callback.answer("Time window applies to top only", show_alert=False)
            return
        try:
            settings.time_filter = parse_time_filter((callback.data or "").split(":", 1)[1])
        except (ConfigError, IndexError):
            await callback.answer("Unknown time window", show_alert=False)
            return
        await callback.answer(f"Time: {settings.time_filter.value}")
        await run_feed(bot, chat_id)

    @router.callback_query(F.data.in_({"stall:yes", "stall:no"}))
    async def stall_answered(callback: CallbackQuery) -> None:
        if callback.message is None:
            await callback.answer()
            return
        answer = callback.data == "stall:yes"
        if not prompts.resolve(callback.message.chat.id, answer):
            await callback.answer("This question has expired", show_alert=False)
            return
        await callback.answer("Continuing" if answer else "Stopping")
        try:
            await callback.message.edit_reply_markup(reply_markup=None)
        except TelegramAPIError:
            LOGGER.debug("Could not remove stall keyboard")

    @router.message(F.text & ~F.text.startswith("/"))
    async def source_text(message: Message, bot: Bot) -> None:
        try:
            source = normalize_source(message.text)
        except ConfigError as exc:
            await message.answer(str(exc))
            return
        feeds.settings(message.chat.id).source = source
        await run_feed(bot, message.chat.id)

    return router

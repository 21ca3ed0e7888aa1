from __future__ import annotations

from aiogram import Bot, Dispatcher
from aiogram.client.default import DefaultBotProperties
from aiogram.fsm.storage.memory import MemoryStorage


def create_bot(token: str) -> Bot:
    return Bot(token=token, default=DefaultBotProperties(parse_mode=None, link_preview_is_disabled=True))


def create_dispatcher() -> Dispatcher:
    return Dispatcher(storage=MemoryStorage())

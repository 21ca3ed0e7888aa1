from __future__ import annotations

from aiogram.types import InlineKeyboardButton, InlineKeyboardMarkup, KeyboardButton, ReplyKeyboardMarkup

from ..feed.models import Sort, TimeFilter

BUTTON_FEED = "Feed"
BUTTON_SORT = "Sort"
BUTTON_SETTINGS = "Settings"
BUTTON_HELP = "Help"


def main_menu_keyboard() -> ReplyKeyboardMarkup:
    rows = [
        [KeyboardButton(text=BUTTON_FEED), KeyboardButton(text=BUTTON_SORT)],
        [KeyboardButton(text=BUTTON_SETTINGS), KeyboardButton(text=BUTTON_HELP)],
    ]
    return ReplyKeyboardMarkup(keyboard=rows, resize_keyboard=True)


def _mark(label: str, active: bool) -> str:
    return f"• {label}" if active else label


def sort_keyboard(active: Sort | None = None) -> InlineKeyboardMarkup:
    buttons = [
        InlineKeyboardButton(text=_mark(sort.value, sort is active), callback_data=f"sort:{sort.value}")
        for sort in Sort
    ]
    return InlineKeyboardMarkup(inline_keyboard=[buttons[:3], buttons[3:]])


def time_keyboard(active: TimeFilter | None = None) -> InlineKeyboardMarkup:
    buttons = [
        InlineKeyboardButton(text=_mark(window.value, window is active), callback_data=f"time:{window.value}")
        for window in TimeFilter
    ]
    return InlineKeyboardMarkup(inline_keyboard=[buttons[:3], buttons[3:]])


def stall_keyboard() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(
        inline_keyboard=[
            [
                InlineKeyboardButton(text="Continue", callback_data="stall:yes"),
                InlineKeyboardButton(text="Stop", callback_data="stall:no"),
            ]
        ]
    )

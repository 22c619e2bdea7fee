from __future__ import annotations

from aiogram.types import InlineKeyboardMarkup, InlineKeyboardButton

from companion.utils.constants import MOOD_EMOJIS

_INTENSITY_LABELS = {
    1: "1 Very low",
    2: "2 Low",
    3: "3 Moderate",
    4: "4 High",
    5: "5 Very high",
}


def mood_keyboard() -> InlineKeyboardMarkup:
    buttons = [
        InlineKeyboardButton(text=f"{emoji} {mood.title()}", callback_data=f"checkin:mood:{mood}")
        for mood, emoji in MOOD_EMOJIS.items()
    ]
    rows = [buttons[i:i + 4] for i in range(0, len(buttons), 4)]
    return InlineKeyboardMarkup(inline_keyboard=rows)


def intensity_keyboard() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(
        inline_keyboard=[
            [
                InlineKeyboardButton(text=label, callback_data=f"checkin:intensity:{value}")
                for value, label in _INTENSITY_LABELS.items()
            ]
        ]
    )


def reset_confirm_keyboard() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(
        inline_keyboard=[
            [
                InlineKeyboardButton(text="Yes, clear it", callback_data="reset:confirm"),
                InlineKeyboardButton(text="Cancel", callback_data="reset:cancel"),
            ]
        ]
    )

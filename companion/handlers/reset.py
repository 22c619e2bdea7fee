from aiogram import Router, F
from aiogram.filters import Command
from aiogram.types import Message, CallbackQuery

from companion.db.store import Store
from companion.keyboards.inline import reset_confirm_keyboard
from companion.services import history

router = Router()


@router.message(Command("reset"))
async def cmd_reset(message: Message) -> None:
    await message.answer(
        "Are you sure you want to clear our whole conversation history? This can't be undone.",
        reply_markup=reset_confirm_keyboard(),
    )


@router.callback_query(F.data == "reset:confirm")
async def reset_confirmed(callback: CallbackQuery, store: Store) -> None:
    deleted = await history.clear(store, callback.from_user.id)
    await callback.message.edit_text(
        f"History cleared. Messages removed: {deleted}.\nWe can start fresh \U0001f499"
    )
    await callback.answer()


@router.callback_query(F.data == "reset:cancel")
async def reset_cancelled(callback: CallbackQuery) -> None:
    await callback.message.edit_text("Cancelled. Your history is kept.")
    await callback.answer()

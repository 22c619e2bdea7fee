from aiogram import Router, F
from aiogram.filters import Command
from aiogram.fsm.context import FSMContext
from aiogram.fsm.state import State, StatesGroup
from aiogram.types import Message, CallbackQuery

from companion.db.store import Store
from companion.keyboards.inline import intensity_keyboard, mood_keyboard
from companion.services.mood_analytics import format_checkin, record_checkin
from companion.utils.constants import MOOD_LABELS, MOOD_TREND_LENGTH

router = Router()


class CheckInStates(StatesGroup):
    waiting_activity = State()


@router.message(Command("checkin"))
async def cmd_checkin(message: Message, state: FSMContext) -> None:
    await state.clear()
    await message.answer("How are you feeling right now?", reply_markup=mood_keyboard())


@router.callback_query(F.data.startswith("checkin:mood:"))
async def checkin_mood_chosen(callback: CallbackQuery, state: FSMContext) -> None:
    mood = callback.data.split(":", 2)[2]
    if mood not in MOOD_LABELS:
        await callback.answer("Unknown mood.", show_alert=True)
        return

    await state.update_data(mood=mood)
    await callback.message.edit_text(
        f"Mood: <b>{mood}</b>\n\nHow strong is it?",
        parse_mode="HTML",
        reply_markup=intensity_keyboard(),
    )
    await callback.answer()


@router.callback_query(F.data.startswith("checkin:intensity:"))
async def checkin_intensity_chosen(callback: CallbackQuery, state: FSMContext) -> None:
    data = await state.get_data()
    if "mood" not in data:
        await callback.answer("This check-in expired, send /checkin again.", show_alert=True)
        return
    try:
        intensity = int(callback.data.split(":", 2)[2])
    except (ValueError, IndexError):
        await callback.answer("Invalid data.", show_alert=True)
        return

    if not 1 <= intensity <= 5:
        await callback.answer("Intensity must be between 1 and 5.", show_alert=True)
        return

    await state.update_data(intensity=intensity)
    await state.set_state(CheckInStates.waiting_activity)
    await callback.message.edit_text(
        f"Mood: <b>{data['mood']}</b> ({intensity}/5)\n\n"
        "What are you doing right now? Write it, or send /skip",
        parse_mode="HTML",
    )
    await callback.answer()


@router.message(CheckInStates.waiting_activity, Command("cancel"))
async def checkin_cancel(message: Message, state: FSMContext) -> None:
    await state.clear()
    await message.answer("Check-in cancelled.")


@router.message(CheckInStates.waiting_activity, Command("skip"))
async def checkin_activity_skipped(message: Message, state: FSMContext, store: Store) -> None:
    await _finish_checkin(message, state, store, None)


# Other commands are left to their own handlers and the check-in stays pending.
@router.message(CheckInStates.waiting_activity, F.text, ~F.text.startswith("/"))
async def checkin_activity_received(message: Message, state: FSMContext, store: Store) -> None:
    await _finish_checkin(message, state, store, message.text)


async def _finish_checkin(
    message: Message, state: FSMContext, store: Store, activity: str | None
) -> None:
    data = await state.get_data()
    await state.clear()
    checkin = await record_checkin(
        store,
        message.from_user.id,
        data["mood"],
        intensity=data.get("intensity"),
        activity=activity,
    )
    recent = await store.query_checkins(message.from_user.id, limit=MOOD_TREND_LENGTH)
    await message.answer(format_checkin(checkin, recent), parse_mode="HTML")

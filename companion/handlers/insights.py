from aiogram import Router
from aiogram.filters import Command, CommandObject
from aiogram.types import Message

from companion.db.store import Store
from companion.services.mood_analytics import Timeframe, analyze, format_report

router = Router()


@router.message(Command("insights"))
async def cmd_insights(message: Message, command: CommandObject, store: Store) -> None:
    arg = (command.args or "week").strip().lower()
    try:
        timeframe = Timeframe(arg)
    except ValueError:
        await message.answer("Usage: /insights [week|month|all]")
        return

    result = await analyze(store, message.from_user.id, timeframe)
    await message.answer(format_report(result), parse_mode="HTML")

from aiogram import Router
from aiogram.filters import CommandStart, Command
from aiogram.types import Message

from companion.db.store import Store
from companion.utils.prompts import WELCOME_MESSAGE, HELP_MESSAGE

router = Router()


@router.message(CommandStart())
async def cmd_start(message: Message, store: Store) -> None:
    await store.upsert_user(
        message.from_user.id,
        username=message.from_user.username,
        first_name=message.from_user.first_name,
        language_code=message.from_user.language_code,
    )
    await message.answer(WELCOME_MESSAGE, parse_mode="HTML")


@router.message(Command("help"))
async def cmd_help(message: Message) -> None:
    await message.answer(HELP_MESSAGE, parse_mode="HTML")

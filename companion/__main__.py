import asyncio
import logging

from aiogram.exceptions import TelegramAPIError
from aiogram.types import BotCommand

from companion.config import get_settings
from companion.db.engine import get_db, init_db
from companion.db.store import Store
from companion.loader import create_bot, create_dispatcher, create_llm
from companion.services import history


async def main() -> None:
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    logger = logging.getLogger(__name__)

    logger.info("Initializing database...")
    await init_db(settings.db_path)

    db = await get_db(settings.db_path)
    try:
        await history.prune(Store(db), settings.history_retention_days)
    finally:
        await db.close()

    bot = create_bot(settings)
    llm = create_llm(settings)
    dp = create_dispatcher(settings, llm)

    try:
        await bot.set_my_commands([
            BotCommand(command="start", description="Start talking"),
            BotCommand(command="help", description="List commands"),
            BotCommand(command="checkin", description="Log your mood"),
            BotCommand(command="insights", description="Mood trends"),
            BotCommand(command="context", description="What I remember"),
            BotCommand(command="reset", description="Clear conversation history"),
        ])
        logger.info("Bot commands menu set.")
    except TelegramAPIError:
        logger.warning("Failed to set bot commands menu, continuing anyway.", exc_info=True)

    logger.info("Starting companion bot...")
    try:
        await dp.start_polling(bot)
    finally:
        await llm.close()
        await bot.session.close()


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()

from aiogram import Dispatcher

from companion.handlers import start, checkin, insights, context, reset, chat


def register_all_handlers(dp: Dispatcher) -> None:
    dp.include_router(start.router)
    dp.include_router(checkin.router)
    dp.include_router(insights.router)
    dp.include_router(context.router)
    dp.include_router(reset.router)
    # chat MUST be last: it is the catch-all for text messages
    dp.include_router(chat.router)
